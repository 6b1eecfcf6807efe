"""Block registry: defaults, type validation and settings coercion."""

import pytest

from pressroom.modules.email_builder.blocks import (
    ALIGNMENTS, DEFAULT_SETTINGS, PALETTE, SOCIAL_PLATFORMS,
    Block, BlockType, InvalidBlockError, UnknownBlockTypeError,
    block_types_payload, coerce_settings, default_content, default_settings, load_settings,
    new_block, validate_content,
)


EXPECTED_CONTENT_KEYS = {
    BlockType.HEADER: {"logo", "title"},
    BlockType.TEXT: {"html"},
    BlockType.IMAGE: {"src", "alt", "link"},
    BlockType.BUTTON: {"text", "url"},
    BlockType.DIVIDER: set(),
    BlockType.COLUMNS: {"columns"},
    BlockType.SOCIAL: {"links"},
    BlockType.FOOTER: {"address", "unsubscribeText"},
}

EXPECTED_SETTINGS_KEYS = {
    BlockType.HEADER: {"backgroundColor", "textColor", "padding", "align"},
    BlockType.TEXT: {"fontSize", "textColor", "padding", "align"},
    BlockType.IMAGE: {"width", "padding", "align"},
    BlockType.BUTTON: {"backgroundColor", "textColor", "borderRadius", "padding", "align"},
    BlockType.DIVIDER: {"color", "style", "thickness", "padding"},
    BlockType.COLUMNS: {"columnCount", "gap", "padding"},
    BlockType.SOCIAL: {"iconSize", "gap", "padding", "align"},
    BlockType.FOOTER: {"backgroundColor", "textColor", "fontSize", "padding", "align"},
}


def test_eight_block_types():
    assert [t.value for t in BlockType] == [
        "header", "text", "image", "button", "divider", "columns", "social", "footer",
    ]
    assert [entry[0] for entry in PALETTE] == list(BlockType)


@pytest.mark.parametrize("block_type", list(BlockType))
def test_default_shapes(block_type):
    assert set(default_content(block_type)) == EXPECTED_CONTENT_KEYS[block_type]
    settings = default_settings(block_type)
    assert set(settings) == EXPECTED_SETTINGS_KEYS[block_type]
    assert isinstance(settings["padding"], int)
    if block_type not in (BlockType.DIVIDER, BlockType.COLUMNS):
        assert settings["align"] in ALIGNMENTS


@pytest.mark.parametrize("block_type", list(BlockType))
def test_defaults_are_not_shared(block_type):
    first_content, second_content = default_content(block_type), default_content(block_type)
    first_settings, second_settings = default_settings(block_type), default_settings(block_type)

    assert first_content == second_content
    assert first_content is not second_content
    assert first_settings is not second_settings

    first_settings["padding"] = 99
    assert second_settings["padding"] != 99
    assert DEFAULT_SETTINGS[block_type]["padding"] != 99


def test_nested_default_lists_are_fresh():
    a = default_content("columns")
    b = default_content("columns")
    a["columns"][0]["html"] = "<p>changed</p>"
    a["columns"].append({"html": "<p>extra</p>"})
    assert b["columns"] == [{"html": "<p>Column 1</p>"}, {"html": "<p>Column 2</p>"}]

    links = default_content("social")["links"]
    links[0]["url"] = "https://facebook.com/x"
    assert default_content("social")["links"][0]["url"] == ""
    assert [link["platform"] for link in links] == list(SOCIAL_PLATFORMS)


def test_default_settings_table_is_read_only():
    with pytest.raises(TypeError):
        DEFAULT_SETTINGS[BlockType.TEXT]["padding"] = 5
    with pytest.raises(TypeError):
        DEFAULT_SETTINGS["text"] = {}


def test_unknown_type_fails_loudly():
    with pytest.raises(UnknownBlockTypeError):
        default_content("carousel")
    with pytest.raises(UnknownBlockTypeError):
        default_settings("carousel")
    with pytest.raises(ValueError):
        Block.from_dict({"id": "x", "type": "carousel", "content": {}, "settings": {}})
    with pytest.raises(UnknownBlockTypeError):
        Block.from_dict({"id": "x", "content": {}})


def test_block_create_and_round_trip():
    block = Block.create("button")
    assert block.id.startswith("block-")
    assert block.type is BlockType.BUTTON
    assert block.content == {"text": "Click Here", "url": ""}

    data = block.to_dict()
    assert data["type"] == "button"
    assert Block.from_dict(data) == block


def test_setting_falls_back_to_type_default():
    block = Block.from_dict({"type": "columns", "content": {}, "settings": {"gap": 20}})
    assert block.setting("gap") == 20
    assert block.setting("padding") == 20
    assert block.setting("columnCount") == 2


def test_coerce_settings_converts_form_numbers():
    assert coerce_settings("text", {"fontSize": "18", "padding": 0}) == {"fontSize": 18, "padding": 0}
    assert coerce_settings("divider", {"style": "dashed"}) == {"style": "dashed"}
    assert coerce_settings("columns", {"columnCount": "3"}) == {"columnCount": 3}


@pytest.mark.parametrize("block_type,partial", [
    ("text", {"fontSize": "big"}),
    ("text", {"fontSize": 99}),
    ("header", {"align": "middle"}),
    ("divider", {"style": "double"}),
    ("divider", {"align": "left"}),
    ("columns", {"columnCount": 0}),
    ("button", {"backgroundColor": 12}),
])
def test_coerce_settings_rejects_bad_values(block_type, partial):
    with pytest.raises(InvalidBlockError):
        coerce_settings(block_type, partial)


def test_block_types_payload_lists_every_type():
    payload = block_types_payload()
    assert [entry["type"] for entry in payload["palette"]] == [t.value for t in BlockType]
    assert set(payload["fields"]) == {t.value for t in BlockType}
    assert payload["defaults"]["footer"]["settings"]["fontSize"] == 14


def test_new_block_ids_are_never_reused():
    blocks = [new_block("text") for _ in range(50)]
    assert len({b.id for b in blocks}) == 50


# ---------------------------------------------------------------------------
# Loading stored or posted blocks
# ---------------------------------------------------------------------------

def test_from_dict_coerces_numeric_settings():
    block = Block.from_dict({"type": "social", "content": {}, "settings": {"iconSize": "40", "gap": ""}})
    assert block.settings == {"iconSize": 40}
    assert block.setting("gap") == 10


def test_from_dict_without_id_gets_a_fresh_one():
    first = Block.from_dict({"type": "text"})
    second = Block.from_dict({"type": "text"})
    assert first.id.startswith("block-")
    assert first.id != second.id
    assert first.content == {} and first.settings == {}


@pytest.mark.parametrize("data", [
    "text",
    ["text"],
    {"type": "text", "content": "oops"},
    {"type": "text", "settings": ["padding", 20]},
    {"type": "columns", "settings": {"gap": "wide"}},
    {"type": "social", "settings": {"iconSize": '32" onerror="alert(1)'}},
    {"type": "columns", "content": {"columns": ["x", "y"]}},
    {"type": "columns", "content": {"columns": {"html": "<p>1</p>"}}},
    {"type": "columns", "content": {"columns": [{"html": 5}, {"html": "<p>2</p>"}]}},
    {"type": "social", "content": {"links": [{"platform": "facebook", "url": 7}]}},
    {"type": "social", "content": {"links": "https://facebook.com"}},
    {"type": "button", "content": {"text": ["Click"]}},
])
def test_from_dict_rejects_malformed_blocks(data):
    with pytest.raises(InvalidBlockError):
        Block.from_dict(data)


def test_validate_content_leaves_unknown_keys_alone():
    content = {"html": "<p>x</p>", "note": 3}
    assert validate_content("text", content) == content
    assert validate_content("text", None) == {}
    assert validate_content("text", content) is not content


def test_load_settings():
    assert load_settings("text", None) == {}
    assert load_settings("text", {"fontSize": "18", "padding": None}) == {"fontSize": 18}
    with pytest.raises(InvalidBlockError):
        load_settings("text", "fontSize=18")


def test_setting_ignores_invalid_value_set_in_place():
    block = Block.create("social")
    block.settings["iconSize"] = '32" onerror="alert(1)'
    assert block.setting("iconSize") == 32

    block.settings["iconSize"] = "48"
    assert block.setting("iconSize") == 48
