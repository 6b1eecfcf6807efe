"""
Email Blocks
============

Block types, per-type defaults and the Block record used by the email
template builder.

The set of block types is closed. Every lookup keyed by type goes through
BlockType, and anything outside the eight variants raises
UnknownBlockTypeError instead of quietly producing an empty block.
"""

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

logger = logging.getLogger(__name__)


class EmailBuilderError(Exception):
    """Base class for email builder errors"""


class UnknownBlockTypeError(EmailBuilderError, ValueError):
    """Raised when a block type is not one of the known variants"""


class InvalidBlockError(EmailBuilderError, ValueError):
    """Raised when block content or settings are malformed"""


class BlockNotFoundError(EmailBuilderError, KeyError):
    """Raised when a block id does not exist in the document"""

    def __str__(self):
        return f"Block not found: {self.args[0]}" if self.args else "Block not found"


class BlockType(str, Enum):
    HEADER = 'header'
    TEXT = 'text'
    IMAGE = 'image'
    BUTTON = 'button'
    DIVIDER = 'divider'
    COLUMNS = 'columns'
    SOCIAL = 'social'
    FOOTER = 'footer'

    def __str__(self):
        return self.value


ALIGNMENTS = ('left', 'center', 'right')
DIVIDER_STYLES = ('solid', 'dashed', 'dotted')
SOCIAL_PLATFORMS = ('facebook', 'twitter', 'linkedin', 'instagram')

MIN_COLUMNS = 2
MAX_COLUMNS = 3

# Sidebar palette, in display order
PALETTE = (
    (BlockType.HEADER, 'Header', '📰'),
    (BlockType.TEXT, 'Text', '📝'),
    (BlockType.IMAGE, 'Image', '🖼️'),
    (BlockType.BUTTON, 'Button', '🔘'),
    (BlockType.DIVIDER, 'Divider', '➖'),
    (BlockType.COLUMNS, 'Columns', '📊'),
    (BlockType.SOCIAL, 'Social', '🔗'),
    (BlockType.FOOTER, 'Footer', '📄'),
)

DEFAULT_SETTINGS = MappingProxyType({
    BlockType.HEADER: MappingProxyType({
        'backgroundColor': '#ffffff', 'textColor': '#111827', 'padding': 20, 'align': 'center',
    }),
    BlockType.TEXT: MappingProxyType({
        'fontSize': 16, 'textColor': '#374151', 'padding': 20, 'align': 'left',
    }),
    BlockType.IMAGE: MappingProxyType({
        'width': '100%', 'align': 'center', 'padding': 20,
    }),
    BlockType.BUTTON: MappingProxyType({
        'backgroundColor': '#3b82f6', 'textColor': '#ffffff', 'borderRadius': 5,
        'padding': 20, 'align': 'center',
    }),
    BlockType.DIVIDER: MappingProxyType({
        'color': '#e5e7eb', 'style': 'solid', 'thickness': 1, 'padding': 20,
    }),
    BlockType.COLUMNS: MappingProxyType({
        'columnCount': 2, 'gap': 20, 'padding': 20,
    }),
    BlockType.SOCIAL: MappingProxyType({
        'iconSize': 32, 'gap': 10, 'padding': 20, 'align': 'center',
    }),
    BlockType.FOOTER: MappingProxyType({
        'backgroundColor': '#f9fafb', 'textColor': '#6b7280', 'fontSize': 14,
        'padding': 20, 'align': 'center',
    }),
})


def _column(index):
    return {'html': f'<p>Column {index}</p>'}


def _header_content():
    return {'logo': '', 'title': 'Email Header'}


def _text_content():
    return {'html': '<p>Enter your text here...</p>'}


def _image_content():
    return {'src': '', 'alt': '', 'link': ''}


def _button_content():
    return {'text': 'Click Here', 'url': ''}


def _divider_content():
    return {}


def _columns_content():
    return {'columns': [_column(i + 1) for i in range(MIN_COLUMNS)]}


def _social_content():
    return {'links': [{'platform': platform, 'url': ''} for platform in SOCIAL_PLATFORMS]}


def _footer_content():
    return {'address': 'Your Company\n123 Street\nCity, State 12345', 'unsubscribeText': 'Unsubscribe'}


# Factories, not values: every call builds new dicts and lists
_CONTENT_FACTORIES = MappingProxyType({
    BlockType.HEADER: _header_content,
    BlockType.TEXT: _text_content,
    BlockType.IMAGE: _image_content,
    BlockType.BUTTON: _button_content,
    BlockType.DIVIDER: _divider_content,
    BlockType.COLUMNS: _columns_content,
    BlockType.SOCIAL: _social_content,
    BlockType.FOOTER: _footer_content,
})


# Editable fields shown in the settings panel.
# Each entry: (key, label, kind, options) where options is (min, max) for
# numbers and a tuple of choices for selects.
CONTENT_FIELDS = MappingProxyType({
    BlockType.HEADER: (
        ('logo', 'Logo URL', 'url', None),
        ('title', 'Title', 'text', None),
    ),
    BlockType.TEXT: (
        ('html', 'Text Content', 'markup', None),
    ),
    BlockType.IMAGE: (
        ('src', 'Image URL', 'url', None),
        ('alt', 'Alt Text', 'text', None),
        ('link', 'Link URL (optional)', 'url', None),
    ),
    BlockType.BUTTON: (
        ('text', 'Button Text', 'text', None),
        ('url', 'Button URL', 'url', None),
    ),
    BlockType.DIVIDER: (),
    BlockType.COLUMNS: (
        ('columns', 'Columns', 'columns', (MIN_COLUMNS, MAX_COLUMNS)),
    ),
    BlockType.SOCIAL: (
        ('links', 'Social Links', 'links', SOCIAL_PLATFORMS),
    ),
    BlockType.FOOTER: (
        ('address', 'Address', 'textarea', None),
        ('unsubscribeText', 'Unsubscribe Text', 'text', None),
    ),
})

_PADDING = ('padding', 'Padding', 'number', (0, 100))
_ALIGN = ('align', 'Alignment', 'select', ALIGNMENTS)

SETTINGS_FIELDS = MappingProxyType({
    BlockType.HEADER: (
        ('backgroundColor', 'Background Color', 'color', None),
        ('textColor', 'Text Color', 'color', None),
        _PADDING, _ALIGN,
    ),
    BlockType.TEXT: (
        ('textColor', 'Text Color', 'color', None),
        ('fontSize', 'Font Size', 'number', (10, 48)),
        _PADDING, _ALIGN,
    ),
    BlockType.IMAGE: (
        ('width', 'Width', 'text', None),
        _PADDING, _ALIGN,
    ),
    BlockType.BUTTON: (
        ('backgroundColor', 'Background Color', 'color', None),
        ('textColor', 'Text Color', 'color', None),
        ('borderRadius', 'Border Radius', 'number', (0, 50)),
        _PADDING, _ALIGN,
    ),
    BlockType.DIVIDER: (
        ('color', 'Color', 'color', None),
        ('style', 'Style', 'select', DIVIDER_STYLES),
        ('thickness', 'Thickness', 'number', (1, 10)),
        _PADDING,
    ),
    BlockType.COLUMNS: (
        ('gap', 'Gap', 'number', (0, 100)),
        _PADDING,
    ),
    BlockType.SOCIAL: (
        ('iconSize', 'Icon Size', 'number', (16, 64)),
        ('gap', 'Gap', 'number', (0, 100)),
        _PADDING, _ALIGN,
    ),
    BlockType.FOOTER: (
        ('backgroundColor', 'Background Color', 'color', None),
        ('textColor', 'Text Color', 'color', None),
        ('fontSize', 'Font Size', 'number', (10, 48)),
        _PADDING, _ALIGN,
    ),
})

for _table in (DEFAULT_SETTINGS, _CONTENT_FACTORIES, CONTENT_FIELDS, SETTINGS_FIELDS):
    _missing = set(BlockType) - set(_table)
    if _missing:
        raise RuntimeError(f"Block registry is missing types: {sorted(t.value for t in _missing)}")


def coerce_block_type(value):
    """Return the BlockType for a string or BlockType, failing loudly on anything else"""
    if isinstance(value, BlockType):
        return value
    try:
        return BlockType(value)
    except ValueError:
        raise UnknownBlockTypeError(f"Unknown block type: {value!r}") from None


def default_content(block_type):
    """Fresh default content payload for a block type"""
    return _CONTENT_FACTORIES[coerce_block_type(block_type)]()


def default_settings(block_type):
    """Fresh copy of the default style settings for a block type"""
    return dict(DEFAULT_SETTINGS[coerce_block_type(block_type)])


def new_block_id():
    return f"block-{uuid.uuid4().hex}"


def coerce_settings(block_type, partial):
    """Validate and normalise a partial settings update from form input.

    Numeric fields accept ints or numeric strings and must fall inside the
    field's bounds. Select fields must be one of their choices. Keys the
    block type does not know about are rejected.
    """
    block_type = coerce_block_type(block_type)
    if partial is not None and not isinstance(partial, dict):
        raise InvalidBlockError(f"Block settings must be an object, got {type(partial).__name__}")
    fields = {f[0]: f for f in SETTINGS_FIELDS[block_type]}
    if block_type == BlockType.COLUMNS:
        fields['columnCount'] = ('columnCount', 'Columns', 'number', (MIN_COLUMNS, MAX_COLUMNS))

    cleaned = {}
    for key, value in (partial or {}).items():
        if key not in fields:
            raise InvalidBlockError(f"Unknown setting '{key}' for {block_type.value} block")
        _, label, kind, options = fields[key]

        if kind == 'number':
            try:
                value = int(value)
            except (TypeError, ValueError):
                raise InvalidBlockError(f"{label} must be a whole number") from None
            low, high = options
            if not low <= value <= high:
                raise InvalidBlockError(f"{label} must be between {low} and {high}")
        elif kind == 'select':
            if value not in options:
                raise InvalidBlockError(f"{label} must be one of: {', '.join(options)}")
        elif not isinstance(value, str):
            raise InvalidBlockError(f"{label} must be a string")

        cleaned[key] = value
    return cleaned


def _check_string(label, value):
    if value is not None and not isinstance(value, str):
        raise InvalidBlockError(f"{label} must be a string")


def validate_content(block_type, content):
    """Check the known content fields of a (partial) content payload.

    Text, URL and markup fields must be strings. Column cells must be
    objects with string html, social links objects with string platform and
    url. Keys the block type does not describe are left alone. Returns a
    shallow copy.
    """
    block_type = coerce_block_type(block_type)
    if content is None:
        return {}
    if not isinstance(content, dict):
        raise InvalidBlockError(f"Block content must be an object, got {type(content).__name__}")

    for key, label, kind, _ in CONTENT_FIELDS[block_type]:
        if key not in content:
            continue
        value = content[key]
        if kind == 'columns':
            if not isinstance(value, list):
                raise InvalidBlockError("Columns must be a list")
            for column in value:
                if not isinstance(column, dict):
                    raise InvalidBlockError("Each column must be an object with html")
                _check_string('Column html', column.get('html'))
        elif kind == 'links':
            if not isinstance(value, list):
                raise InvalidBlockError("Social links must be a list")
            for link in value:
                if not isinstance(link, dict):
                    raise InvalidBlockError("Each social link must be an object with platform and url")
                _check_string('Social platform', link.get('platform'))
                _check_string('Social link URL', link.get('url'))
        else:
            _check_string(label, value)
    return dict(content)


def load_settings(block_type, settings):
    """Stored settings, validated with coerce_settings. Empty values are dropped so the type default applies."""
    if settings is None:
        return {}
    if not isinstance(settings, dict):
        return coerce_settings(block_type, settings)
    return coerce_settings(block_type, {k: v for k, v in settings.items() if v is not None and v != ''})


@dataclass
class Block:
    """One typed unit of an email document"""

    id: str
    type: BlockType
    content: dict = field(default_factory=dict)
    settings: dict = field(default_factory=dict)

    def __post_init__(self):
        self.type = coerce_block_type(self.type)

    @classmethod
    def create(cls, block_type):
        """Build a new block with a fresh id and the type's defaults"""
        block_type = coerce_block_type(block_type)
        return cls(
            id=new_block_id(),
            type=block_type,
            content=default_content(block_type),
            settings=default_settings(block_type),
        )

    @classmethod
    def from_dict(cls, data):
        """Load a block from its JSON form.

        Content must pass validate_content and settings coerce_settings, so
        numeric settings come back as ints. Missing settings fall back to the
        type's defaults at render time. A missing id gets a fresh one.
        A Block instance has its content checked and is returned as is.
        """
        if isinstance(data, Block):
            validate_content(data.type, data.content)
            return data
        if not isinstance(data, dict):
            raise InvalidBlockError(f"Block must be an object, got {type(data).__name__}")

        block_type = coerce_block_type(data.get('type'))
        return cls(
            id=str(data.get('id') or new_block_id()),
            type=block_type,
            content=validate_content(block_type, data.get('content')),
            settings=load_settings(block_type, data.get('settings')),
        )

    def setting(self, key):
        """Setting value, falling back to the type default when it is missing or invalid"""
        value = self.settings.get(key)
        if value is None or value == '':
            return DEFAULT_SETTINGS[self.type].get(key)
        try:
            return coerce_settings(self.type, {key: value})[key]
        except InvalidBlockError as e:
            logger.warning(f"Block {self.id}: ignoring setting {key}={value!r} ({e})")
            return DEFAULT_SETTINGS[self.type].get(key)

    def to_dict(self):
        return {
            'id': self.id,
            'type': self.type.value,
            'content': self.content,
            'settings': self.settings,
        }


def new_block(block_type):
    return Block.create(block_type)


def block_types_payload():
    """Palette plus field descriptions, for the editor sidebar"""
    return {
        'palette': [
            {'type': block_type.value, 'label': label, 'icon': icon}
            for block_type, label, icon in PALETTE
        ],
        'fields': {
            block_type.value: {
                'content': [
                    {'key': key, 'label': label, 'kind': kind, 'options': options}
                    for key, label, kind, options in CONTENT_FIELDS[block_type]
                ],
                'settings': [
                    {'key': key, 'label': label, 'kind': kind, 'options': options}
                    for key, label, kind, options in SETTINGS_FIELDS[block_type]
                ],
            }
            for block_type in BlockType
        },
        'defaults': {
            block_type.value: {
                'content': default_content(block_type),
                'settings': default_settings(block_type),
            }
            for block_type in BlockType
        },
    }
