"""
Email Compiler
==============

Compiles an email document (list of blocks) into a standalone HTML email.

Layout is built from nested tables with inline styles only, since many
mail clients ignore flexbox, grid and <style> blocks. Every block becomes
its own full-width table; the page shell centres a 600px content table
on a gray background.
"""

import logging

from .blocks import Block, BlockType
from .sanitizer import escape_text, safe_url, sanitize_markup
from .styles import (
    CONTENT_BG, EMAIL_WIDTH, HEADING_FONT_SIZE, LOGO_MAX_HEIGHT, PAGE_BG,
    SOCIAL_ICON_COLOR, half, inline_style, percent, px,
)

logger = logging.getLogger(__name__)

DEFAULT_TITLE = 'Email Template'

_TABLE = '<table width="100%" cellpadding="0" cellspacing="0" border="0" role="presentation"'


def _wrap(cell_style, inner, table_style=''):
    table_attrs = f' style="{table_style}"' if table_style else ''
    return f'''
          {_TABLE}{table_attrs}>
            <tr>
              <td style="{cell_style}">
                {inner}
              </td>
            </tr>
          </table>'''


def _compile_header(block, **_):
    content = block.content
    logo = safe_url(content.get('logo'))
    logo_html = ''
    if logo:
        logo_html = (
            f'<img src="{logo}" alt="Logo" style="{inline_style(("max-height", px(LOGO_MAX_HEIGHT)), ("margin-bottom", "10px"), ("border", "0"))}" />'
        )
    title_style = inline_style(
        ('color', block.setting('textColor')), ('margin', '0'), ('font-size', px(HEADING_FONT_SIZE)),
    )
    cell_style = inline_style(
        ('background-color', block.setting('backgroundColor')),
        ('color', block.setting('textColor')),
        ('padding', px(block.setting('padding'))),
        ('text-align', block.setting('align')),
    )
    inner = f'{logo_html}\n                <h1 style="{title_style}">{escape_text(content.get("title"))}</h1>'
    return _wrap(cell_style, inner, inline_style(('background-color', block.setting('backgroundColor'))))


def _compile_text(block, **_):
    cell_style = inline_style(
        ('padding', px(block.setting('padding'))),
        ('font-size', px(block.setting('fontSize'))),
        ('color', block.setting('textColor')),
        ('text-align', block.setting('align')),
    )
    return _wrap(cell_style, sanitize_markup(block.content.get('html')))


def _compile_image(block, **_):
    content = block.content
    src = safe_url(content.get('src'))
    inner = ''
    if src:
        img_style = inline_style(
            ('max-width', block.setting('width')), ('height', 'auto'), ('border', '0'), ('display', 'inline-block'),
        )
        inner = f'<img src="{src}" alt="{escape_text(content.get("alt"))}" style="{img_style}" />'
        link = safe_url(content.get('link'))
        if link:
            inner = f'<a href="{link}" target="_blank">{inner}</a>'
    cell_style = inline_style(
        ('padding', px(block.setting('padding'))), ('text-align', block.setting('align')),
    )
    return _wrap(cell_style, inner)


def _compile_button(block, **_):
    content = block.content
    link_style = inline_style(
        ('display', 'inline-block'),
        ('background-color', block.setting('backgroundColor')),
        ('color', block.setting('textColor')),
        ('padding', '12px 24px'),
        ('border-radius', px(block.setting('borderRadius'))),
        ('text-decoration', 'none'),
        ('font-weight', '600'),
    )
    inner = (
        f'<a href="{safe_url(content.get("url"), "#")}" style="{link_style}">'
        f'{escape_text(content.get("text"))}</a>'
    )
    cell_style = inline_style(
        ('padding', px(block.setting('padding'))), ('text-align', block.setting('align')),
    )
    return _wrap(cell_style, inner)


def _compile_divider(block, **_):
    rule = f"{px(block.setting('thickness'))} {block.setting('style')} {block.setting('color')}"
    hr_style = inline_style(('border', 'none'), ('border-top', rule), ('margin', '0'))
    return _wrap(inline_style(('padding', px(block.setting('padding')))), f'<hr style="{hr_style}" />')


def _compile_columns(block, **_):
    columns = block.content.get('columns') or []
    cells = ''
    if columns:
        width = percent(len(columns))
        gap = half(block.setting('gap'))
        cell_style = inline_style(('width', width), ('padding', f'0 {gap}px'), ('vertical-align', 'top'))
        cells = ''.join(
            f'''
                    <td width="{escape_text(width)}" style="{cell_style}">
                      {sanitize_markup(column.get('html'))}
                    </td>'''
            for column in columns
        )
    else:
        logger.warning(f"Columns block {block.id} has no columns; emitting an empty row")

    inner = f'''{_TABLE}>
                  <tr>{cells}
                  </tr>
                </table>'''
    return _wrap(inline_style(('padding', px(block.setting('padding')))), inner)


def _social_icon(platform, size, icon_url):
    if icon_url:
        icon_style = inline_style(
            ('width', px(size)), ('height', px(size)), ('border-radius', '50%'), ('border', '0'),
        )
        return f'<img src="{icon_url}" alt="{escape_text(platform)}" width="{escape_text(size)}" height="{escape_text(size)}" style="{icon_style}" />'
    badge_style = inline_style(
        ('display', 'inline-block'),
        ('width', px(size)),
        ('height', px(size)),
        ('line-height', px(size)),
        ('border-radius', '50%'),
        ('background-color', SOCIAL_ICON_COLOR),
        ('color', '#ffffff'),
        ('font-size', px(max(int(int(size) / 2), 8))),
        ('font-weight', 'bold'),
        ('text-align', 'center'),
        ('font-family', 'Arial, sans-serif'),
    )
    return f'<span style="{badge_style}">{escape_text(platform[:1].upper())}</span>'


def _compile_social(block, social_icons=None, **_):
    social_icons = social_icons or {}
    size = block.setting('iconSize')
    gap = half(block.setting('gap'))
    anchors = []
    for link in block.content.get('links') or []:
        url = safe_url(link.get('url'))
        if not url:
            continue
        platform = link.get('platform') or ''
        icon = _social_icon(platform, size, safe_url(social_icons.get(platform)))
        anchor_style = inline_style(('display', 'inline-block'), ('margin', f'0 {gap}px'), ('text-decoration', 'none'))
        anchors.append(f'<a href="{url}" title="{escape_text(platform)}" style="{anchor_style}">{icon}</a>')

    cell_style = inline_style(
        ('padding', px(block.setting('padding'))), ('text-align', block.setting('align')),
    )
    return _wrap(cell_style, '\n                '.join(anchors))


def _compile_footer(block, **_):
    content = block.content
    text_color = block.setting('textColor')
    cell_style = inline_style(
        ('background-color', block.setting('backgroundColor')),
        ('padding', px(block.setting('padding'))),
        ('font-size', px(block.setting('fontSize'))),
        ('color', text_color),
        ('text-align', block.setting('align')),
    )
    address_style = inline_style(('margin', '0 0 10px'), ('white-space', 'pre-line'))
    link_style = inline_style(('color', text_color), ('text-decoration', 'underline'))
    inner = (
        f'<p style="{address_style}">{escape_text(content.get("address"))}</p>\n'
        f'                <a href="#unsubscribe" style="{link_style}">{escape_text(content.get("unsubscribeText"))}</a>'
    )
    return _wrap(cell_style, inner, inline_style(('background-color', block.setting('backgroundColor'))))


_BLOCK_COMPILERS = {
    BlockType.HEADER: _compile_header,
    BlockType.TEXT: _compile_text,
    BlockType.IMAGE: _compile_image,
    BlockType.BUTTON: _compile_button,
    BlockType.DIVIDER: _compile_divider,
    BlockType.COLUMNS: _compile_columns,
    BlockType.SOCIAL: _compile_social,
    BlockType.FOOTER: _compile_footer,
}

_missing = set(BlockType) - set(_BLOCK_COMPILERS)
if _missing:
    raise RuntimeError(f"Email compiler has no case for: {sorted(t.value for t in _missing)}")


def compile_block(block, social_icons=None):
    """Compile one block (Block or dict) to its table fragment"""
    block = Block.from_dict(block)
    return _BLOCK_COMPILERS[block.type](block, social_icons=social_icons)


def compile_document(blocks, title=None, social_icons=None):
    """Compile a list of blocks into a complete HTML email.

    Args:
        blocks: list of Block objects or block dicts, in display order
        title: document <title>, defaults to 'Email Template'
        social_icons: optional {platform: icon image URL}; platforms without
            an entry get a drawn initial badge

    Returns:
        Complete HTML document string with all styles inline
    """
    fragments = '\n'.join(compile_block(block, social_icons) for block in blocks)

    return f'''<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{escape_text(title or DEFAULT_TITLE)}</title>
</head>
<body style="margin: 0; padding: 0; font-family: Arial, sans-serif; background-color: {PAGE_BG};">
  {_TABLE} style="background-color: {PAGE_BG};">
    <tr>
      <td align="center" style="padding: 20px 0;">
        <table width="{EMAIL_WIDTH}" cellpadding="0" cellspacing="0" border="0" role="presentation" style="background-color: {CONTENT_BG}; max-width: {EMAIL_WIDTH}px;">
          <tr>
            <td>{fragments}
            </td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>'''
