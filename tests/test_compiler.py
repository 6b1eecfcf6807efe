"""Email compiler and editor canvas output."""

import pytest

from pressroom.modules.email_builder.blocks import Block, BlockType, InvalidBlockError, UnknownBlockTypeError
from pressroom.modules.email_builder.compiler import compile_block, compile_document
from pressroom.modules.email_builder.document import EmailDocument
from pressroom.modules.email_builder.preview import (
    EMPTY_CANVAS_MESSAGE, NO_SELECTION_MESSAGE,
    render_block, render_canvas, render_palette, render_settings_panel,
)
from pressroom.modules.email_builder.sanitizer import safe_url, sanitize_markup


def block(block_type, content=None, settings=None):
    created = Block.create(block_type)
    created.content.update(content or {})
    created.settings.update(settings or {})
    return created


# ---------------------------------------------------------------------------
# compile_document: shell
# ---------------------------------------------------------------------------

def test_empty_document_is_a_valid_shell():
    html = compile_document([])
    assert html.startswith("<!DOCTYPE html>")
    assert '<meta charset="UTF-8">' in html
    assert 'name="viewport"' in html
    assert "<title>Email Template</title>" in html
    assert html.count("<table") == 2
    assert 'width="600"' in html
    assert "background-color: #f3f4f6;" in html


def test_title_is_escaped():
    html = compile_document([], title="Deals & <News>")
    assert "<title>Deals &amp; &lt;News&gt;</title>" in html


def test_compile_is_deterministic_and_keeps_order():
    blocks = [block("header"), block("text"), block("footer")]
    first = compile_document(blocks)
    assert first == compile_document(blocks)
    assert first.index("Email Header") < first.index("Enter your text here") < first.index("Unsubscribe")


def test_accepts_block_dicts():
    data = [block("button", {"text": "Read more"}).to_dict()]
    assert "Read more" in compile_document(data)


def test_unknown_type_raises():
    with pytest.raises(UnknownBlockTypeError):
        compile_document([{"id": "x", "type": "carousel", "content": {}, "settings": {}}])


def test_no_style_blocks_or_flex_in_email():
    blocks = [block(t) for t in BlockType]
    html = compile_document(blocks)
    assert "<style" not in html
    assert "display: flex" not in html


# ---------------------------------------------------------------------------
# compile_block: per type
# ---------------------------------------------------------------------------

def test_header_logo_only_when_set():
    assert "<img" not in compile_block(block("header"))
    html = compile_block(block("header", {"logo": "https://cdn.example.com/logo.png", "title": "<b>Hi</b>"}))
    assert 'src="https://cdn.example.com/logo.png"' in html
    assert "max-height: 60px;" in html
    assert "&lt;b&gt;Hi&lt;/b&gt;" in html


def test_text_padding_zero_is_kept():
    html = compile_block(block("text", settings={"padding": 0}))
    assert "padding: 0px;" in html


def test_image_without_src_keeps_empty_cell():
    html = compile_block(block("image", {"link": "https://example.com"}))
    assert "<img" not in html
    assert "<a " not in html
    assert "<td" in html


def test_image_link_only_with_src():
    html = compile_block(block("image", {"src": "https://cdn.example.com/a.png", "alt": "Cover"}))
    assert 'alt="Cover"' in html
    assert "<a " not in html

    linked = compile_block(block("image", {"src": "https://cdn.example.com/a.png", "link": "https://example.com/issue"}))
    assert 'href="https://example.com/issue"' in linked


def test_button_url_defaults_to_hash():
    assert 'href="#"' in compile_block(block("button"))
    assert 'href="https://example.com/subscribe"' in compile_block(
        block("button", {"url": "https://example.com/subscribe"})
    )


def test_divider_border():
    html = compile_block(block("divider", settings={"style": "dashed", "thickness": 2, "color": "#ff0000"}))
    assert "border-top: 2px dashed #ff0000;" in html


@pytest.mark.parametrize("count,width", [(2, "50%"), (3, "33.3333%")])
def test_columns_share_width(count, width):
    columns = [{"html": f"<p>C{i}</p>"} for i in range(count)]
    html = compile_block(block("columns", {"columns": columns}, {"columnCount": count}))
    assert html.count(f"width: {width};") == count
    assert html.count(f'<td width="{width}"') == count
    assert "padding: 0 10px;" in html


def test_default_columns_compile_two_cells():
    html = compile_document([block("columns")])
    assert html.count("width: 50%;") == 2
    assert "Column 1" in html and "Column 2" in html


def test_columns_without_columns_emit_empty_row():
    html = compile_block(block("columns", {"columns": []}))
    assert "<tr>" in html
    assert 'width="' not in html.split("<tr>", 2)[2]


def test_social_only_links_with_url():
    assert "<a " not in compile_block(block("social"))

    social = block("social")
    social.content["links"][1]["url"] = "https://twitter.com/magazine"
    html = compile_block(social)
    assert html.count("<a ") == 1
    assert 'href="https://twitter.com/magazine"' in html
    assert ">T</span>" in html
    assert "#3b82f6" in html


def test_social_uses_configured_icons():
    social = block("social")
    social.content["links"][0]["url"] = "https://facebook.com/magazine"
    html = compile_block(social, social_icons={"facebook": "https://cdn.example.com/fb.png"})
    assert 'src="https://cdn.example.com/fb.png"' in html
    assert "<span" not in html


def test_footer_address_and_unsubscribe():
    html = compile_block(block("footer", {"address": "Acme <Media>\nLondon"}))
    assert "Acme &lt;Media&gt;\nLondon" in html
    assert "white-space: pre-line;" in html
    assert 'href="#unsubscribe"' in html


# ---------------------------------------------------------------------------
# sanitizing
# ---------------------------------------------------------------------------

def test_markup_is_sanitized_in_both_outputs():
    evil = block("text", {"html": '<p onclick="steal()">Hi</p><script>alert(1)</script>'})
    for html in (compile_block(evil), render_block(evil)):
        assert "<script" not in html
        assert "onclick" not in html
        assert "<p>Hi</p>" in html


def test_unsafe_urls_are_dropped():
    button = block("button", {"url": "javascript:alert(1)"})
    assert 'href="#"' in compile_block(button)
    assert "javascript" not in render_block(button)

    image = block("image", {"src": "javascript:alert(1)"})
    assert "<img" not in compile_block(image)


@pytest.mark.parametrize("url,expected", [
    ("https://example.com/?a=1&b=2", "https://example.com/?a=1&amp;b=2"),
    ("mailto:editor@example.com", "mailto:editor@example.com"),
    ("/relative/path", "/relative/path"),
    ("  ", ""),
    ("data:text/html;base64,AAAA", ""),
])
def test_safe_url(url, expected):
    assert safe_url(url) == expected


def test_sanitize_keeps_allowed_inline_styles():
    html = sanitize_markup('<p style="color: red; position: fixed;">x</p>')
    assert "color: red" in html
    assert "position" not in html


# ---------------------------------------------------------------------------
# editor canvas
# ---------------------------------------------------------------------------

def test_empty_canvas_hint():
    html = render_canvas(EmailDocument())
    assert EMPTY_CANVAS_MESSAGE in html
    assert "block-wrapper" not in html


def test_canvas_wrappers_and_selection(abcd):
    html = render_canvas(EmailDocument(abcd, selected_block_id="B"))
    assert html.count('class="block-wrapper') == 4
    assert html.count("block-selected") == 1
    assert 'class="block-wrapper block-selected" draggable="true" data-index="1" data-block-id="B"' in html
    assert html.count('data-action="delete"') == 4
    assert "max-width: 600px;" in html


def test_mobile_preview_width(abcd):
    html = render_canvas(EmailDocument(abcd), preview_mode="mobile")
    assert "max-width: 375px;" in html
    assert "canvas-mobile" in html
    assert "max-width: 600px;" in render_canvas(EmailDocument(abcd), preview_mode="tablet")


def test_canvas_image_placeholder():
    html = render_block(block("image"))
    assert "Image placeholder" in html
    assert "<img" not in html


def test_canvas_columns_use_flex():
    html = render_block(block("columns"))
    assert "display: flex;" in html
    assert html.count("flex: 1;") == 2


def test_canvas_social_only_links_with_url():
    social = block("social")
    assert "<a " not in render_block(social)
    social.content["links"][3]["url"] = "https://instagram.com/magazine"
    assert render_block(social).count("<a ") == 1


def test_palette_lists_every_type():
    html = render_palette()
    for block_type in BlockType:
        assert f'data-type="{block_type.value}"' in html


def test_settings_panel():
    document = EmailDocument()
    assert NO_SELECTION_MESSAGE in render_settings_panel(document)

    header = document.add_block("header")
    html = render_settings_panel(document)
    assert f'data-block-id="{header.id}"' in html
    assert 'data-scope="content" data-key="title"' in html
    assert 'data-scope="settings" data-key="backgroundColor"' in html
    assert 'value="Email Header"' in html
    assert '<option value="center" selected>' in html


def test_settings_panel_columns_and_links():
    document = EmailDocument()
    document.add_block("columns")
    html = render_settings_panel(document)
    assert '<option value="2" selected>2 Columns</option>' in html
    assert html.count("<textarea") == 2

    document.add_block("social")
    html = render_settings_panel(document)
    assert "Facebook URL" in html and "Instagram URL" in html


# ---------------------------------------------------------------------------
# malformed settings and content
# ---------------------------------------------------------------------------

def test_columns_literal_block_dict_compiles_two_equal_cells():
    html = compile_document([{
        "type": "columns",
        "content": {"columns": [{"html": "<p>1</p>"}, {"html": "<p>2</p>"}]},
        "settings": {"gap": 20, "padding": 20},
    }])
    assert html.count("width: 50%;") == 2
    assert html.count('<td width="50%"') == 2
    assert "<p>1</p>" in html and "<p>2</p>" in html


def test_icon_size_cannot_break_out_of_attributes():
    social = block("social")
    social.content["links"][0]["url"] = "https://facebook.com/magazine"
    social.settings["iconSize"] = '32" onerror="alert(1)'

    html = compile_block(social, social_icons={"facebook": "https://cdn.example.com/fb.png"})
    assert "onerror" not in html
    assert 'width="32" height="32"' in html
    assert "onerror" not in render_block(social)


def test_icon_size_string_from_dict_is_rejected():
    data = block("social").to_dict()
    data["settings"]["iconSize"] = '32" onerror="alert(1)'
    with pytest.raises(InvalidBlockError):
        compile_document([data], social_icons={"facebook": "https://cdn.example.com/fb.png"})


def test_numeric_strings_in_stored_settings_are_coerced():
    data = block("social").to_dict()
    data["settings"]["iconSize"] = "40"
    data["content"]["links"][0]["url"] = "https://facebook.com/magazine"
    html = compile_document([data], social_icons={"facebook": "https://cdn.example.com/fb.png"})
    assert 'width="40" height="40"' in html


@pytest.mark.parametrize("content", [
    {"columns": ["x", "y"]},
    {"columns": [None, {"html": "<p>2</p>"}]},
])
def test_malformed_columns_raise_instead_of_crashing(content):
    data = {"id": "c1", "type": "columns", "content": content, "settings": {}}
    with pytest.raises(InvalidBlockError):
        compile_document([data])
    with pytest.raises(InvalidBlockError):
        render_canvas(EmailDocument.from_list([data]))


def test_malformed_links_raise_instead_of_crashing():
    data = {"id": "s1", "type": "social", "content": {"links": ["https://facebook.com"]}, "settings": {}}
    with pytest.raises(InvalidBlockError):
        render_block(data)
