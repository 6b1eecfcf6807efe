"""Inline style helpers shared by the canvas renderer and the email compiler."""

from .sanitizer import safe_css_value

# Canvas and compiler both draw social icons with this color when no icon image is set
SOCIAL_ICON_COLOR = '#3b82f6'
PLACEHOLDER_BG = '#f3f4f6'
PLACEHOLDER_TEXT = '#9ca3af'
PAGE_BG = '#f3f4f6'
CONTENT_BG = '#ffffff'
EMAIL_WIDTH = 600
MOBILE_WIDTH = 375
HEADING_FONT_SIZE = 24
LOGO_MAX_HEIGHT = 60


def px(value):
    return f"{safe_css_value(value)}px"


def half(value):
    """Half of a numeric setting, without a trailing .0"""
    return f"{float(value) / 2:g}"


def percent(count):
    """Equal share of 100% for count columns"""
    return f"{round(100 / count, 4):g}%"


def inline_style(*pairs):
    """Build a style attribute value from (property, value) pairs, skipping empty values"""
    parts = []
    for prop, value in pairs:
        if value is None or value == '':
            continue
        parts.append(f"{prop}: {safe_css_value(value)};")
    return ' '.join(parts)
