"""
Editor Modes
============

Switching between the block builder ("structured") and the raw HTML
editor ("freeform").

Going to freeform compiles the current blocks once. Coming back needs an
explicit confirmation and starts from an empty document: there is no
parser from arbitrary HTML back into blocks, so the round trip is lossy
on purpose.
"""

import logging
from enum import Enum

from .compiler import compile_document
from .document import EmailDocument

logger = logging.getLogger(__name__)

EXPORT_FILENAME = 'email-template.html'


class EditorMode(str, Enum):
    STRUCTURED = 'structured'
    FREEFORM = 'freeform'

    def __str__(self):
        return self.value


class ModeBridge:

    def __init__(self, document, mode=EditorMode.STRUCTURED, freeform_html='', compile_options=None):
        self.document = document
        self.mode = EditorMode(mode)
        self.freeform_html = freeform_html or ''
        self.compile_options = compile_options or {}

    @classmethod
    def for_template(cls, blocks, content='', on_change=None, compile_options=None):
        """Open a stored template: block editor when blocks exist, raw HTML otherwise"""
        document = EmailDocument(blocks or (), on_change=on_change)
        mode = EditorMode.STRUCTURED if len(document) else EditorMode.FREEFORM
        return cls(document, mode=mode, freeform_html=content, compile_options=compile_options)

    def compile(self, blocks=None):
        return compile_document(self.document.blocks if blocks is None else blocks, **self.compile_options)

    def switch_to_freeform(self):
        """Snapshot the blocks as HTML and present the raw editor. The blocks stay in memory."""
        if self.mode == EditorMode.FREEFORM:
            return self.freeform_html
        self.freeform_html = self.compile()
        self.mode = EditorMode.FREEFORM
        logger.debug(f"Switched to freeform with {len(self.document)} blocks compiled")
        return self.freeform_html

    def switch_to_structured(self, confirmed=False):
        """Return to the block builder, discarding the document.

        Without confirmation nothing changes and False is returned.
        """
        if self.mode == EditorMode.STRUCTURED:
            return True
        if not confirmed:
            return False
        self.document.clear()
        self.mode = EditorMode.STRUCTURED
        logger.debug("Switched to structured mode with an empty document")
        return True

    def switch(self, mode, confirmed=False):
        mode = EditorMode(mode)
        if mode == EditorMode.FREEFORM:
            self.switch_to_freeform()
            return True
        return self.switch_to_structured(confirmed)

    def save_payload(self):
        """Content and blocks to persist, both taken from one snapshot of the document.

        In freeform mode the raw HTML is the content and no blocks are stored.
        """
        if self.mode == EditorMode.FREEFORM:
            return {'content': self.freeform_html, 'blocks': None}
        snapshot = self.document.blocks
        return {
            'content': self.compile(snapshot),
            'blocks': [block.to_dict() for block in snapshot],
        }

    def export_html(self):
        """HTML offered as the downloadable file"""
        return self.save_payload()['content']
