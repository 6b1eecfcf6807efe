"""
Email Builder Routes
====================

Admin pages and JSON endpoints for the email template builder.
All routes require an admin session.

The editor keeps the document in the browser; each /api/document call
posts the current blocks with one action, and gets back the new blocks
plus the re-rendered canvas and settings panel.
"""

import logging
from functools import wraps

from flask import Response, jsonify, redirect, render_template, request, session, url_for
from markupsafe import Markup

from pressroom.core import LoggingService, db_log, get_config_value

from . import email_builder_bp
from .backend import TemplateBackendClient
from .blocks import (
    BlockNotFoundError, EmailBuilderError, block_types_payload, coerce_settings,
)
from .document import EmailDocument
from .drag import DragReorderController
from .mode import EXPORT_FILENAME, EditorMode, ModeBridge
from .models import (
    delete_template, duplicate_template, get_all_templates, get_template,
    init_templates_db, save_template,
)
from .preview import render_canvas, render_palette, render_settings_panel

logger = logging.getLogger(__name__)

LIST_FILTERS = ('all', 'default')


def _db_log(level, message, details=None):
    """Log to framework's persistent DB logger"""
    db_log(level, 'email_templates', message, details)


def require_admin(api=True):
    """Decorator to require admin login.

    API routes answer 401 JSON, pages redirect to the admin login.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if 'admin_id' not in session:
                if api:
                    return jsonify({'error': 'Authentication required'}), 401
                return _redirect_to_login()
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def _compile_options(subject=None):
    return {
        'title': subject or get_config_value('EMAIL_TEMPLATE_TITLE', 'Email Template'),
        'social_icons': get_config_value('EMAIL_BUILDER_SOCIAL_ICONS', {}) or {},
    }


def _get_json():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _error(message, status):
    return jsonify({'error': message}), status


def _list_args():
    """Search text and filter from the query string"""
    search = (request.args.get('q') or '').strip()
    list_filter = request.args.get('filter', 'all')
    if list_filter not in LIST_FILTERS:
        list_filter = 'all'
    return search, list_filter


# ===================
# PAGES
# ===================

@email_builder_bp.route('/')
@require_admin(api=False)
def template_list():
    """List saved templates, with search and the all/default filter"""
    init_templates_db()
    search, list_filter = _list_args()
    templates = get_all_templates(search=search, default_only=list_filter == 'default')
    return render_template(
        'email_builder/list.html',
        templates=templates,
        search=search,
        list_filter=list_filter,
    )


@email_builder_bp.route('/editor/new')
@require_admin(api=False)
def new_template():
    """New template editor, starts in the block builder"""
    blank = {'id': None, 'name': '', 'subject': '', 'content': '', 'blocks': [], 'is_default': False}
    return _editor_page(blank, EditorMode.STRUCTURED)


@email_builder_bp.route('/editor/<int:template_id>')
@require_admin(api=False)
def edit_template(template_id):
    """Edit a saved template. Templates without blocks open in the HTML editor."""
    init_templates_db()
    template = get_template(template_id)
    if not template:
        return _error('Template not found', 404)

    try:
        bridge = ModeBridge.for_template(template.get('blocks'), template.get('content'))
    except EmailBuilderError as e:
        logger.error(f"Template {template_id} has unreadable blocks: {e}")
        _db_log('error', 'Template blocks failed to load', {'id': template_id, 'error': str(e)})
        return _error(f'Template blocks could not be loaded: {e}', 422)
    return _editor_page(template, bridge.mode, bridge.document)


# ===================
# TEMPLATE API
# ===================

@email_builder_bp.route('/api/templates')
@require_admin()
def list_templates():
    init_templates_db()
    search, list_filter = _list_args()
    templates = get_all_templates(search=search, default_only=list_filter == 'default')
    return jsonify({'templates': templates}), 200


@email_builder_bp.route('/api/templates/<int:template_id>')
@require_admin()
def template_detail(template_id):
    init_templates_db()
    template = get_template(template_id)
    if not template:
        return _error('Template not found', 404)
    return jsonify(template), 200


@email_builder_bp.route('/api/block-types')
@require_admin()
def block_types():
    """Palette entries, editable fields and defaults for every block type"""
    return jsonify(block_types_payload()), 200


@email_builder_bp.route('/save', methods=['POST'])
@email_builder_bp.route('/save/<int:template_id>', methods=['POST'])
@require_admin()
def save(template_id=None):
    """Create or update a template.

    The compiled HTML and the stored blocks come from the same document
    snapshot, so the sent email always matches what re-opens in the editor.
    """
    data = _get_json()
    name = str(data.get('name') or '').strip()
    subject = str(data.get('subject') or '').strip()
    if not name or not subject:
        return _error('Name and subject are required', 400)

    try:
        bridge = _bridge_from_request(data, subject)
        payload = bridge.save_payload()
    except (EmailBuilderError, TypeError, ValueError) as e:
        logger.warning(f"Rejected template save: {e}")
        return _error(str(e), 400)

    record = {
        'id': template_id,
        'name': name,
        'subject': subject,
        'content': payload['content'],
        'blocks': payload['blocks'],
        'is_default': bool(data.get('is_default', False)),
    }

    init_templates_db()
    saved_id = save_template(record)
    if not saved_id:
        if template_id and not get_template(template_id):
            return _error('Template not found', 404)
        return _error('Failed to save template', 500)

    logger.info(f"Template saved: {saved_id}")
    _db_log('info', f'Template saved: {name}', {'id': saved_id, 'mode': bridge.mode.value})

    record.pop('id')
    backend_result = _push_to_backend(saved_id, record, created=template_id is None)
    return jsonify({'id': saved_id, 'message': 'Template saved', 'backend': backend_result}), 200


@email_builder_bp.route('/<int:template_id>/duplicate', methods=['POST'])
@require_admin()
def duplicate(template_id):
    """Copy a template. The editor opens the copy from the returned id."""
    init_templates_db()
    copy_id = duplicate_template(template_id)
    if not copy_id:
        if not get_template(template_id):
            return _error('Template not found', 404)
        return _error('Failed to duplicate template', 500)

    logger.info(f"Template {template_id} duplicated as {copy_id}")
    copy = get_template(copy_id)
    backend_result = _push_to_backend(
        copy_id, {k: copy[k] for k in ('name', 'subject', 'content', 'blocks', 'is_default')}, created=True,
    )
    return jsonify({
        'id': copy_id,
        'message': 'Template duplicated',
        'editor_url': url_for('email_builder.edit_template', template_id=copy_id),
        'backend': backend_result,
    }), 201


@email_builder_bp.route('/<int:template_id>', methods=['DELETE'])
@require_admin()
def delete(template_id):
    """Delete a template"""
    init_templates_db()
    if delete_template(template_id):
        logger.info(f"Template {template_id} deleted")
        _db_log('info', 'Template deleted', {'id': template_id})
        return jsonify({'message': 'Template deleted'}), 200
    return _error('Template not found', 404)


# ===================
# EDITOR API
# ===================

def _bridge_from_request(data, subject=None):
    mode = data.get('mode') or EditorMode.STRUCTURED.value
    if mode not in (EditorMode.STRUCTURED.value, EditorMode.FREEFORM.value):
        raise EmailBuilderError(f"Unknown editor mode: {mode}")
    document = EmailDocument.from_list(data.get('blocks') or [])
    return ModeBridge(
        document,
        mode=mode,
        freeform_html=str(data.get('content') or ''),
        compile_options=_compile_options(subject or data.get('subject')),
    )


def _apply_action(document, drag, action):
    """Run one editor action against the document. Returns True if the blocks changed."""
    op = action.get('op')

    if op == 'add':
        document.add_block(action.get('type'))
    elif op == 'update_content':
        document.update_block_content(action.get('block_id'), action.get('content') or {})
    elif op == 'update_settings':
        block = document.get_block(action.get('block_id'))
        document.update_block_settings(block.id, coerce_settings(block.type, action.get('settings') or {}))
    elif op == 'resize_columns':
        document.resize_columns(action.get('block_id'), action.get('count', 2))
    elif op == 'delete':
        document.delete_block(action.get('block_id'))
    elif op == 'move':
        document.move_block(int(action.get('from')), int(action.get('to')))
    elif op == 'select':
        document.select_block(action.get('block_id'))
        return False
    elif op == 'drag_start':
        drag.drag_start(int(action.get('index')))
        return False
    elif op == 'drag_over':
        return drag.drag_over(int(action.get('index'))) is not None
    elif op == 'drag_end':
        drag.drag_end()
        return False
    else:
        raise EmailBuilderError(f"Unknown editor action: {op!r}")
    return True


@email_builder_bp.route('/api/document', methods=['POST'])
@require_admin()
def document_action():
    """Apply one editor action to the posted document state"""
    data = _get_json()
    action = data.get('action')
    if not isinstance(action, dict):
        return _error('No action provided', 400)

    try:
        document = EmailDocument.from_list(
            data.get('blocks') or [],
            selected_block_id=data.get('selected_block_id'),
        )
        drag = DragReorderController(document, source_index=data.get('drag_source'))
        changed = _apply_action(document, drag, action)
        canvas = render_canvas(document, data.get('preview_mode', 'desktop'))
        settings_panel = render_settings_panel(document)
    except BlockNotFoundError as e:
        return _error(str(e), 404)
    except (EmailBuilderError, IndexError, TypeError, ValueError) as e:
        logger.warning(f"Rejected editor action {action.get('op')}: {e}")
        return _error(str(e), 400)

    return jsonify({
        'blocks': document.to_list(),
        'selected_block_id': document.selected_block_id,
        'drag_source': drag.source_index,
        'changed': changed,
        'canvas': canvas,
        'settings_panel': settings_panel,
    }), 200


@email_builder_bp.route('/api/preview', methods=['POST'])
@require_admin()
def preview():
    """Compile the posted blocks to the email HTML"""
    data = _get_json()
    try:
        bridge = _bridge_from_request(data)
        html = bridge.export_html()
    except EmailBuilderError as e:
        return _error(str(e), 400)
    except Exception as e:
        logger.error(f"Error rendering preview: {e}")
        LoggingService.log_error_with_traceback('email_templates', e, {'blocks': len(data.get('blocks') or [])})
        return _error('Failed to render preview', 500)
    return jsonify({'html': html}), 200


@email_builder_bp.route('/api/export', methods=['POST'])
@require_admin()
def export():
    """Download the compiled email as an .html file"""
    data = _get_json()
    try:
        html = _bridge_from_request(data).export_html()
    except (EmailBuilderError, TypeError, ValueError) as e:
        logger.warning(f"Rejected export: {e}")
        return _error(str(e), 400)

    _db_log('info', 'Template exported', {'mode': data.get('mode', 'structured')})
    return Response(
        html,
        mimetype='text/html',
        headers={'Content-Disposition': f'attachment; filename={EXPORT_FILENAME}'},
    )


@email_builder_bp.route('/api/mode', methods=['POST'])
@require_admin()
def switch_mode():
    """Switch between the block builder and the raw HTML editor.

    Returning to the block builder needs 'confirmed': true and empties the
    document; without it the request is answered with 409 and nothing changes.
    """
    data = _get_json()
    target = data.get('target')
    try:
        bridge = _bridge_from_request(data)
        switched = bridge.switch(target, confirmed=bool(data.get('confirmed')))
    except (EmailBuilderError, ValueError) as e:
        return _error(str(e), 400)

    body = {
        'mode': bridge.mode.value,
        'content': bridge.freeform_html,
        'blocks': bridge.document.to_list(),
        'switched': switched,
    }
    if not switched:
        body['error'] = 'Switching to the visual editor will reset your HTML. Confirm to continue.'
        return jsonify(body), 409
    return jsonify(body), 200


# ===================
# HELPERS
# ===================

def _redirect_to_login():
    """Redirect to admin login page"""
    try:
        return redirect(url_for(get_config_value('PRESSROOM_LOGIN_ENDPOINT', 'dashboard.admin_page')))
    except Exception:
        return redirect('/admin')


def _push_to_backend(template_id, record, created):
    """Mirror a saved template to the CRM backend when one is configured.

    Runs inside the request; a failure is reported in the response and never
    fails the save.
    """
    backend = TemplateBackendClient.from_config()
    if not backend.enabled:
        return None
    return backend.push_template(template_id, record, created=created)


def _editor_page(template, mode, document=None):
    document = document or EmailDocument()
    state = {
        'template_id': template.get('id'),
        'mode': EditorMode(mode).value,
        'blocks': document.to_list(),
        'content': template.get('content') or '',
        'selected_block_id': None,
        'drag_source': None,
        'preview_mode': 'desktop',
        'export_filename': EXPORT_FILENAME,
        'urls': {
            'document': url_for('email_builder.document_action'),
            'mode': url_for('email_builder.switch_mode'),
            'export': url_for('email_builder.export'),
            'save': url_for('email_builder.save', template_id=template['id'])
            if template.get('id') else url_for('email_builder.save'),
            'list': url_for('email_builder.template_list'),
        },
    }
    return render_template(
        'email_builder/editor.html',
        template=template,
        state=state,
        heading='Edit Email Template' if template.get('id') else 'New Email Template',
        palette=Markup(render_palette()),
        canvas=Markup(render_canvas(document)),
        settings_panel=Markup(render_settings_panel(document)),
    )
