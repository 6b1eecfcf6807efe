"""
Email Builder Module
====================

Provides:
- Block-based email template editor (header, text, image, button, divider,
  columns, social, footer blocks) with a live canvas
- Drag-to-reorder with live moves while dragging
- Table-based, inline-styled HTML export for mail clients
- Raw HTML editing mode
- Saved templates (compiled HTML plus editable blocks)
"""

from flask import Blueprint

email_builder_bp = Blueprint(
    'email_builder',
    __name__,
    url_prefix='/admin/email-templates',
    template_folder='templates',
    static_folder='static',
    static_url_path='/email-templates/static'
)

from . import routes  # noqa: E402,F401
