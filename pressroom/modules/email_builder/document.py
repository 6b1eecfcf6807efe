"""
Email Document
==============

Ordered sequence of blocks plus the currently selected block id.

Every mutation rebinds the document to a new tuple of blocks and hands the
full sequence (not a diff) to the on_change callback. Snapshots taken
before a mutation stay as they were.
"""

import logging
from dataclasses import dataclass, replace

from .blocks import (
    Block, BlockType, BlockNotFoundError, InvalidBlockError,
    MAX_COLUMNS, MIN_COLUMNS, coerce_block_type, validate_content,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MoveBlock:
    """Relocate one block: remove it at from_index, reinsert at to_index."""

    from_index: int
    to_index: int

    def apply(self, blocks):
        size = len(blocks)
        for index in (self.from_index, self.to_index):
            if not 0 <= index < size:
                raise IndexError(f"Block index {index} out of range for {size} blocks")
        result = list(blocks)
        moved = result.pop(self.from_index)
        result.insert(self.to_index, moved)
        return tuple(result)


class EmailDocument:
    """Editing-session owner of one email's blocks"""

    def __init__(self, blocks=(), on_change=None, selected_block_id=None):
        self._blocks = self._load(blocks)
        self.on_change = on_change
        self._selected_block_id = None
        if selected_block_id:
            self.select_block(selected_block_id)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def blocks(self):
        return self._blocks

    @property
    def selected_block_id(self):
        return self._selected_block_id

    @property
    def selected_block(self):
        if self._selected_block_id is None:
            return None
        return self.get_block(self._selected_block_id)

    def __len__(self):
        return len(self._blocks)

    def __iter__(self):
        return iter(self._blocks)

    def index_of(self, block_id):
        for index, block in enumerate(self._blocks):
            if block.id == block_id:
                return index
        raise BlockNotFoundError(block_id)

    def get_block(self, block_id):
        return self._blocks[self.index_of(block_id)]

    def to_list(self):
        """JSON-ready list of block dicts"""
        return [block.to_dict() for block in self._blocks]

    @classmethod
    def from_list(cls, data, on_change=None, selected_block_id=None):
        return cls(data or [], on_change=on_change, selected_block_id=selected_block_id)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_block(self, block_type):
        """Append a new block of the given type and select it"""
        block = Block.create(coerce_block_type(block_type))
        self._blocks = self._blocks + (block,)
        self._selected_block_id = block.id
        self._notify()
        logger.debug(f"Added {block.type} block {block.id}")
        return block

    def update_block_content(self, block_id, partial_content):
        """Shallow-merge partial_content into the block's content.

        Nested values such as column lists and social links are replaced
        whole, so callers pass the complete list.
        """
        index = self.index_of(block_id)
        block = self._blocks[index]
        partial_content = validate_content(block.type, partial_content)
        content = {**block.content, **partial_content}
        settings = block.settings

        if block.type == BlockType.COLUMNS and 'columns' in partial_content:
            columns = content['columns']
            if not columns:
                raise InvalidBlockError("A columns block needs at least one column")
            if len(columns) > MAX_COLUMNS:
                raise InvalidBlockError(f"A columns block holds at most {MAX_COLUMNS} columns")
            settings = {**settings, 'columnCount': len(columns)}

        self._replace_at(index, replace(block, content=content, settings=settings))
        return self._blocks[index]

    def update_block_settings(self, block_id, partial_settings):
        """Shallow-merge partial_settings into the block's settings"""
        index = self.index_of(block_id)
        block = self._blocks[index]
        settings = {**block.settings, **(partial_settings or {})}
        self._replace_at(index, replace(block, settings=settings))
        return self._blocks[index]

    def resize_columns(self, block_id, count):
        """Change the number of columns, keeping existing column markup"""
        block = self.get_block(block_id)
        if block.type != BlockType.COLUMNS:
            raise InvalidBlockError(f"Block {block_id} is a {block.type} block, not columns")
        count = max(MIN_COLUMNS, min(MAX_COLUMNS, int(count)))
        existing = block.content.get('columns') or []
        columns = [
            existing[i] if i < len(existing) else {'html': f'<p>Column {i + 1}</p>'}
            for i in range(count)
        ]
        return self.update_block_content(block_id, {'columns': columns})

    def delete_block(self, block_id):
        """Remove a block. Clears the selection when it pointed at that block."""
        index = self.index_of(block_id)
        remaining = self._blocks[:index] + self._blocks[index + 1:]
        if self._selected_block_id == block_id:
            self._selected_block_id = None
        self._commit(remaining)
        logger.debug(f"Deleted block {block_id}")

    def move_block(self, from_index, to_index):
        """Relocate the block at from_index to to_index (list splice, not swap)"""
        return self.apply(MoveBlock(from_index, to_index))

    def apply(self, command):
        """Apply a MoveBlock command and notify"""
        self._commit(command.apply(self._blocks))
        return command

    def replace_blocks(self, blocks):
        """Swap in a whole new block sequence, dropping the selection"""
        new_blocks = self._load(blocks)
        self._selected_block_id = None
        self._commit(new_blocks)

    def clear(self):
        self.replace_blocks(())

    def select_block(self, block_id):
        """Select a block by id, or clear the selection with None"""
        if block_id is not None:
            self.index_of(block_id)
        self._selected_block_id = block_id

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _replace_at(self, index, block):
        self._commit(self._blocks[:index] + (block,) + self._blocks[index + 1:])

    def _commit(self, blocks):
        self._blocks = blocks
        self._notify()

    def _notify(self):
        if self.on_change is not None:
            self.on_change(list(self._blocks))

    @staticmethod
    def _load(blocks):
        if not isinstance(blocks, (list, tuple)):
            raise InvalidBlockError(f"Blocks must be a list, got {type(blocks).__name__}")
        loaded = tuple(Block.from_dict(b) for b in blocks)
        seen = set()
        for block in loaded:
            if block.id in seen:
                raise InvalidBlockError(f"Duplicate block id: {block.id}")
            seen.add(block.id)
        return loaded

