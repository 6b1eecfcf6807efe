"""
Markup Sanitizer
================

Allow-list cleaning for the raw markup fields (text blocks and column
cells) plus escaping helpers for plain text and URLs. Both the editor
canvas and the compiled email go through these helpers, so pasted markup
cannot smuggle scripts or event handlers into a message that is later
delivered to subscribers.
"""

from urllib.parse import urlsplit

import bleach
from bleach.css_sanitizer import CSSSanitizer
from markupsafe import escape

ALLOWED_TAGS = [
    'a', 'abbr', 'b', 'blockquote', 'br', 'code', 'div', 'em', 'font',
    'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'hr', 'i', 'img', 'li', 'ol', 'p',
    'pre', 's', 'small', 'span', 'strong', 'sub', 'sup', 'table', 'tbody',
    'td', 'th', 'thead', 'tr', 'u', 'ul',
]

ALLOWED_ATTRIBUTES = {
    'a': ['href', 'title', 'target', 'rel'],
    'img': ['src', 'alt', 'width', 'height'],
    'table': ['width', 'border', 'cellpadding', 'cellspacing', 'align'],
    'td': ['width', 'align', 'valign', 'colspan', 'rowspan'],
    'th': ['width', 'align', 'valign', 'colspan', 'rowspan'],
    'font': ['color', 'size', 'face'],
    '*': ['style', 'class'],
}

ALLOWED_CSS_PROPERTIES = [
    'background-color', 'border', 'border-radius', 'color', 'display',
    'font-family', 'font-size', 'font-style', 'font-weight', 'height',
    'letter-spacing', 'line-height', 'margin', 'margin-bottom', 'margin-top',
    'max-width', 'padding', 'text-align', 'text-decoration', 'text-transform',
    'vertical-align', 'white-space', 'width',
]

ALLOWED_PROTOCOLS = ['http', 'https', 'mailto', 'tel']

_cleaner = bleach.Cleaner(
    tags=ALLOWED_TAGS,
    attributes=ALLOWED_ATTRIBUTES,
    protocols=ALLOWED_PROTOCOLS,
    css_sanitizer=CSSSanitizer(allowed_css_properties=ALLOWED_CSS_PROPERTIES),
    strip=True,
    strip_comments=True,
)


def sanitize_markup(html):
    """Clean caller-supplied markup down to the email-safe allow list"""
    if not html:
        return ''
    return _cleaner.clean(str(html))


def escape_text(text):
    """HTML-escape a plain text field"""
    return str(escape(text or ''))


def safe_url(url, fallback=''):
    """Return an attribute-safe URL, or fallback when it is empty or uses a disallowed scheme.

    Relative paths and in-page anchors are kept as they are.
    """
    url = (url or '').strip()
    if not url:
        return fallback
    scheme = urlsplit(url).scheme.lower()
    if scheme and scheme not in ALLOWED_PROTOCOLS:
        return fallback
    return str(escape(url))


def safe_css_value(value):
    """Keep a style value from breaking out of its inline style attribute"""
    return str(value).replace('"', '').replace(';', '').replace('<', '').replace('>', '')
