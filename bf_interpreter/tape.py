"""
Unbounded tape of 8-bit cells.

The tape is a doubly-linked chain of fixed-size blocks. It starts as a
single zeroed block with the cursor on its first cell and grows by one
block whenever the cursor walks off either end of the chain:

    ┌────────┐    ┌────────┐    ┌────────┐
    │ block  │<──>│ block  │<──>│ block  │
    │ 64 × u8│    │ 64 × u8│    │ 64 × u8│
    └────────┘    └────────┘    └────────┘
                      ^ cursor = (block, offset)

There is no absolute address; all access is relative to the cursor.
Cell arithmetic wraps modulo 256 and never signals overflow.
"""

from __future__ import annotations
import logging
from typing import Iterator, List, Optional

from .errors import ResourceError

logger = logging.getLogger(__name__)

BLOCK_WIDTH = 64
CELL_MASK = 0xFF


def signed(value: int) -> int:
    """Show a stored byte as a two's-complement value in -128..127."""
    return value - 256 if value > 127 else value


class Block:
    """One link of the chain: BLOCK_WIDTH cells plus neighbour links."""

    __slots__ = ("cells", "prev", "next")

    def __init__(self):
        self.cells = bytearray(BLOCK_WIDTH)
        self.prev: Optional[Block] = None
        self.next: Optional[Block] = None

    def render(self) -> str:
        return "".join(f"[{signed(value)}]" for value in self.cells)


class Tape:
    """Cursor-addressed chain of blocks, grown lazily in both directions."""

    def __init__(self):
        self._block = self._allocate()
        self._offset = 0
        self._block_count = 1

    # --- Allocation ---

    @staticmethod
    def _allocate() -> Block:
        try:
            return Block()
        except MemoryError:
            raise ResourceError("Insufficient memory for a tape block") from None

    # --- Cursor movement ---

    def move_left(self):
        """Step the cursor one cell left, linking a new block if needed."""
        if self._offset > 0:
            self._offset -= 1
            return
        block = self._block
        if block.prev is None:
            ext = self._allocate()
            ext.next = block
            block.prev = ext
            self._block_count += 1
            logger.debug(f"Tape grew left to {self._block_count} blocks")
        self._block = block.prev
        self._offset = BLOCK_WIDTH - 1

    def move_right(self):
        """Step the cursor one cell right, linking a new block if needed."""
        if self._offset < BLOCK_WIDTH - 1:
            self._offset += 1
            return
        block = self._block
        if block.next is None:
            ext = self._allocate()
            ext.prev = block
            block.next = ext
            self._block_count += 1
            logger.debug(f"Tape grew right to {self._block_count} blocks")
        self._block = block.next
        self._offset = 0

    # --- Cell access ---

    def read_cell(self) -> int:
        return self._block.cells[self._offset]

    def set_cell(self, value: int):
        self._block.cells[self._offset] = value & CELL_MASK

    def increment_cell(self):
        cells = self._block.cells
        cells[self._offset] = (cells[self._offset] + 1) & CELL_MASK

    def decrement_cell(self):
        cells = self._block.cells
        cells[self._offset] = (cells[self._offset] - 1) & CELL_MASK

    # --- Introspection ---

    @property
    def offset(self) -> int:
        """Cursor offset within the current block."""
        return self._offset

    @property
    def block(self) -> Block:
        return self._block

    @property
    def block_count(self) -> int:
        return self._block_count

    def blocks(self) -> Iterator[Block]:
        """Iterate blocks from the leftmost to the rightmost."""
        block = self._block
        while block.prev is not None:
            block = block.prev
        while block is not None:
            yield block
            block = block.next

    def dump(self) -> str:
        """Render every cell of every block, one line per block."""
        lines: List[str] = ["START OF TAPE"]
        lines.extend(block.render() for block in self.blocks())
        lines.append("END OF TAPE")
        return "\n".join(lines) + "\n"

    # --- Teardown ---

    def release(self):
        """Unlink every block in the chain. The tape is unusable afterwards."""
        block = self._block
        while block.prev is not None:
            block = block.prev
        released = 0
        while block is not None:
            following = block.next
            block.prev = None
            block.next = None
            block = following
            released += 1
        logger.debug(f"Released {released} tape block(s)")
        self._block = None
        self._block_count = 0
