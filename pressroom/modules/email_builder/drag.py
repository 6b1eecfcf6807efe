"""
Drag Reorder Controller
=======================

Turns canvas drag events into MoveBlock commands. Blocks move live while
the pointer passes over each slot, so a gesture is a stream of moves, not
one move from the start slot to the drop slot.
"""

import logging

from .document import MoveBlock

logger = logging.getLogger(__name__)


class DragReorderController:
    """idle -> dragging(source_index) -> idle"""

    def __init__(self, document, source_index=None):
        self.document = document
        self.source_index = source_index
        self.commands = []

    @property
    def is_dragging(self):
        return self.source_index is not None

    def drag_start(self, index):
        if not 0 <= index < len(self.document):
            raise IndexError(f"Cannot drag block {index}: document has {len(self.document)} blocks")
        self.source_index = index
        self.commands = []

    def drag_over(self, index):
        """Move the dragged block onto the hovered slot.

        Returns the MoveBlock applied, or None when idle or hovering the
        block's own slot.
        """
        if self.source_index is None or index == self.source_index:
            return None
        command = self.document.apply(MoveBlock(self.source_index, index))
        self.commands.append(command)
        self.source_index = index
        return command

    def drag_end(self):
        if self.commands:
            logger.debug(f"Drag finished after {len(self.commands)} moves")
        self.source_index = None
