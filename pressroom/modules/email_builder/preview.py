"""
Canvas Renderer
===============

Renders the email document as the live editor canvas: div/flex based
blocks, draggable wrappers with a type label and delete control, the
selected-block highlight, and the settings panel for the selected block.

Every block case here has a counterpart in compiler.py; a visual change to
one side has to be made on the other as well.
"""

from .blocks import Block, BlockType, CONTENT_FIELDS, PALETTE, SETTINGS_FIELDS
from .sanitizer import escape_text, safe_url, sanitize_markup
from .styles import (
    EMAIL_WIDTH, HEADING_FONT_SIZE, LOGO_MAX_HEIGHT, MOBILE_WIDTH,
    PLACEHOLDER_BG, PLACEHOLDER_TEXT, SOCIAL_ICON_COLOR, inline_style, px,
)

PREVIEW_MODES = ('desktop', 'mobile')
EMPTY_CANVAS_MESSAGE = 'Drag blocks from the left sidebar to start building your email'
NO_SELECTION_MESSAGE = 'Select a block to edit its settings'


def _render_header(block):
    content = block.content
    style = inline_style(
        ('background-color', block.setting('backgroundColor')),
        ('color', block.setting('textColor')),
        ('padding', px(block.setting('padding'))),
        ('text-align', block.setting('align')),
    )
    logo = safe_url(content.get('logo'))
    logo_html = ''
    if logo:
        logo_style = inline_style(('max-height', px(LOGO_MAX_HEIGHT)), ('margin-bottom', '10px'))
        logo_html = f'<img src="{logo}" alt="Logo" style="{logo_style}" />'
    title_style = inline_style(('margin', '0'), ('font-size', px(HEADING_FONT_SIZE)))
    return f'<div style="{style}">{logo_html}<h1 style="{title_style}">{escape_text(content.get("title"))}</h1></div>'


def _render_text(block):
    style = inline_style(
        ('font-size', px(block.setting('fontSize'))),
        ('color', block.setting('textColor')),
        ('padding', px(block.setting('padding'))),
        ('text-align', block.setting('align')),
    )
    return f'<div style="{style}">{sanitize_markup(block.content.get("html"))}</div>'


def _render_image(block):
    content = block.content
    style = inline_style(('padding', px(block.setting('padding'))), ('text-align', block.setting('align')))
    src = safe_url(content.get('src'))
    if not src:
        placeholder_style = inline_style(
            ('background', PLACEHOLDER_BG), ('padding', '40px'),
            ('text-align', 'center'), ('color', PLACEHOLDER_TEXT),
        )
        return f'<div style="{style}"><div class="image-placeholder" style="{placeholder_style}">Image placeholder</div></div>'

    img_style = inline_style(('max-width', block.setting('width')), ('display', 'inline-block'))
    img = f'<img src="{src}" alt="{escape_text(content.get("alt"))}" style="{img_style}" />'
    link = safe_url(content.get('link'))
    if link:
        img = f'<a href="{link}" target="_blank" rel="noopener noreferrer">{img}</a>'
    return f'<div style="{style}">{img}</div>'


def _render_button(block):
    content = block.content
    style = inline_style(('padding', px(block.setting('padding'))), ('text-align', block.setting('align')))
    link_style = inline_style(
        ('display', 'inline-block'),
        ('background-color', block.setting('backgroundColor')),
        ('color', block.setting('textColor')),
        ('padding', '12px 24px'),
        ('border-radius', px(block.setting('borderRadius'))),
        ('text-decoration', 'none'),
        ('font-weight', '600'),
    )
    return (
        f'<div style="{style}"><a href="{safe_url(content.get("url"), "#")}" style="{link_style}">'
        f'{escape_text(content.get("text"))}</a></div>'
    )


def _render_divider(block):
    rule = f"{px(block.setting('thickness'))} {block.setting('style')} {block.setting('color')}"
    hr_style = inline_style(('border', 'none'), ('border-top', rule), ('margin', '0'))
    return f'<div style="{inline_style(("padding", px(block.setting("padding"))))}"><hr style="{hr_style}" /></div>'


def _render_columns(block):
    style = inline_style(
        ('display', 'flex'), ('gap', px(block.setting('gap'))), ('padding', px(block.setting('padding'))),
    )
    cells = ''.join(
        f'<div style="flex: 1;">{sanitize_markup(column.get("html"))}</div>'
        for column in block.content.get('columns') or []
    )
    return f'<div style="{style}">{cells}</div>'


def _render_social(block):
    size = px(block.setting('iconSize'))
    icon_style = inline_style(
        ('width', size), ('height', size), ('background', SOCIAL_ICON_COLOR), ('border-radius', '50%'),
    )
    anchors = []
    for link in block.content.get('links') or []:
        url = safe_url(link.get('url'))
        if not url:
            continue
        anchors.append(
            f'<a href="{url}" title="{escape_text(link.get("platform"))}" target="_blank" '
            f'rel="noopener noreferrer" style="display: block;"><div style="{icon_style}"></div></a>'
        )
    style = inline_style(('padding', px(block.setting('padding'))), ('text-align', block.setting('align')))
    row_style = inline_style(('display', 'inline-flex'), ('gap', px(block.setting('gap'))))
    return f'<div style="{style}"><div style="{row_style}">{"".join(anchors)}</div></div>'


def _render_footer(block):
    content = block.content
    text_color = block.setting('textColor')
    style = inline_style(
        ('background-color', block.setting('backgroundColor')),
        ('color', text_color),
        ('font-size', px(block.setting('fontSize'))),
        ('padding', px(block.setting('padding'))),
        ('text-align', block.setting('align')),
    )
    address_style = inline_style(('margin', '0 0 10px'), ('white-space', 'pre-line'))
    link_style = inline_style(('color', text_color), ('text-decoration', 'underline'))
    return (
        f'<div style="{style}"><p style="{address_style}">{escape_text(content.get("address"))}</p>'
        f'<a href="#unsubscribe" style="{link_style}">{escape_text(content.get("unsubscribeText"))}</a></div>'
    )


_BLOCK_RENDERERS = {
    BlockType.HEADER: _render_header,
    BlockType.TEXT: _render_text,
    BlockType.IMAGE: _render_image,
    BlockType.BUTTON: _render_button,
    BlockType.DIVIDER: _render_divider,
    BlockType.COLUMNS: _render_columns,
    BlockType.SOCIAL: _render_social,
    BlockType.FOOTER: _render_footer,
}

_missing = set(BlockType) - set(_BLOCK_RENDERERS)
if _missing:
    raise RuntimeError(f"Canvas renderer has no case for: {sorted(t.value for t in _missing)}")


def render_block(block):
    """Styled on-screen HTML for one block (Block or dict)"""
    block = Block.from_dict(block)
    return _BLOCK_RENDERERS[block.type](block)


def render_canvas(document, preview_mode='desktop'):
    """Editor canvas for the whole document"""
    if preview_mode not in PREVIEW_MODES:
        preview_mode = 'desktop'
    width = MOBILE_WIDTH if preview_mode == 'mobile' else EMAIL_WIDTH
    canvas_style = inline_style(('max-width', px(width)), ('margin', '0 auto'), ('background-color', '#ffffff'))

    if not len(document):
        body = f'<div class="empty-canvas"><p>{EMPTY_CANVAS_MESSAGE}</p></div>'
    else:
        wrappers = []
        for index, block in enumerate(document.blocks):
            classes = 'block-wrapper'
            if block.id == document.selected_block_id:
                classes += ' block-selected'
            wrappers.append(f'''<div class="{classes}" draggable="true" data-index="{index}" data-block-id="{escape_text(block.id)}">
  <div class="block-controls">
    <span class="block-type">{block.type.value}</span>
    <button type="button" class="block-delete" data-action="delete" data-block-id="{escape_text(block.id)}">✕</button>
  </div>
  <div class="block-content">{render_block(block)}</div>
</div>''')
        body = '\n'.join(wrappers)

    return f'<div class="canvas-content canvas-{preview_mode}" style="{canvas_style}">\n{body}\n</div>'


def render_palette():
    buttons = ''.join(
        f'<button type="button" class="block-template" data-action="add" data-type="{block_type.value}">'
        f'<span class="block-icon">{icon}</span><span class="block-label">{label}</span></button>'
        for block_type, label, icon in PALETTE
    )
    return f'<div class="block-palette">{buttons}</div>'


def _field_input(block, scope, key, label, kind, options):
    source = getattr(block, scope)
    attrs = f'data-scope="{scope}" data-key="{key}" data-block-id="{escape_text(block.id)}"'
    value = source.get(key)
    if value is None and scope == 'settings':
        value = block.setting(key)

    if kind == 'columns':
        count = len(value or [])
        choices = ''.join(
            f'<option value="{n}"{" selected" if n == count else ""}>{n} Columns</option>'
            for n in range(options[0], options[1] + 1)
        )
        areas = ''.join(
            f'<label>Column {i + 1}</label><textarea {attrs} data-index="{i}" rows="3">{escape_text(column.get("html"))}</textarea>'
            for i, column in enumerate(value or [])
        )
        return f'<label>Number of Columns</label><select data-action="resize-columns" {attrs}>{choices}</select>{areas}'
    if kind == 'links':
        return ''.join(
            f'<label>{escape_text((link.get("platform") or "").capitalize())} URL</label>'
            f'<input type="text" {attrs} data-index="{i}" value="{escape_text(link.get("url"))}" placeholder="https://..." />'
            for i, link in enumerate(value or [])
        )
    if kind in ('markup', 'textarea'):
        return f'<label>{label}</label><textarea {attrs} rows="6">{escape_text(value)}</textarea>'
    if kind == 'select':
        choices = ''.join(
            f'<option value="{choice}"{" selected" if choice == value else ""}>{choice.capitalize()}</option>'
            for choice in options
        )
        return f'<label>{label}</label><select {attrs}>{choices}</select>'
    if kind == 'number':
        low, high = options
        return f'<label>{label}</label><input type="number" {attrs} value="{escape_text(value)}" min="{low}" max="{high}" />'
    input_type = 'color' if kind == 'color' else 'text'
    placeholder = ' placeholder="https://..."' if kind == 'url' else ''
    return f'<label>{label}</label><input type="{input_type}" {attrs} value="{escape_text(value)}"{placeholder} />'


def render_settings_panel(document):
    """Settings form for the selected block, or the no-selection hint"""
    block = document.selected_block
    if block is None:
        return f'<div class="no-selection"><p>{NO_SELECTION_MESSAGE}</p></div>'

    content_fields = ''.join(
        _field_input(block, "content", *field) for field in CONTENT_FIELDS[block.type]
    )
    settings_fields = ''.join(
        _field_input(block, "settings", *field) for field in SETTINGS_FIELDS[block.type]
    )
    return f'''<h3 class="sidebar-title">Block Settings</h3>
<div class="settings-form">
  <div class="settings-section"><h4>Content</h4>{content_fields}</div>
  <div class="settings-section"><h4>Style</h4>{settings_fields}</div>
</div>'''
