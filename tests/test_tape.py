"""
Tape tests.

Tests cover:
  - Initial state (one zeroed block, cursor at offset 0)
  - Cell wraparound in both directions
  - Growth to the left and right, and lossless round trips
  - Diagnostic dump format
  - Allocation failure and release
"""

import pytest
from bf_interpreter.errors import ResourceError
from bf_interpreter import tape as tape_module
from bf_interpreter.tape import BLOCK_WIDTH, Block, Tape, signed


def _walk(tape: Tape, steps: int):
    """Move the cursor right (steps > 0) or left (steps < 0)."""
    move = tape.move_right if steps > 0 else tape.move_left
    for _ in range(abs(steps)):
        move()


# ─── Initial state ────────────────────────

class TestInitialState:
    def test_single_zeroed_block(self):
        tape = Tape()
        assert tape.block_count == 1
        assert tape.offset == 0
        assert tape.read_cell() == 0
        assert all(v == 0 for v in tape.block.cells)

    def test_block_width(self):
        assert BLOCK_WIDTH == 64
        assert len(Block().cells) == BLOCK_WIDTH


# ─── Cell arithmetic ──────────────────────

class TestCellArithmetic:
    def test_increment(self):
        tape = Tape()
        tape.increment_cell()
        tape.increment_cell()
        assert tape.read_cell() == 2

    def test_increment_wraps_to_zero(self):
        tape = Tape()
        tape.set_cell(255)
        tape.increment_cell()
        assert tape.read_cell() == 0

    def test_decrement_wraps_to_max(self):
        tape = Tape()
        tape.decrement_cell()
        assert tape.read_cell() == 255

    def test_set_cell_masks_to_byte(self):
        tape = Tape()
        tape.set_cell(0x1FF)
        assert tape.read_cell() == 0xFF
        tape.set_cell(-1)
        assert tape.read_cell() == 255

    def test_full_cycle_returns_to_start(self):
        tape = Tape()
        tape.set_cell(42)
        for _ in range(256):
            tape.increment_cell()
        assert tape.read_cell() == 42


# ─── Growth ───────────────────────────────

class TestGrowth:
    def test_moving_within_block_does_not_allocate(self):
        tape = Tape()
        _walk(tape, BLOCK_WIDTH - 1)
        assert tape.block_count == 1
        assert tape.offset == BLOCK_WIDTH - 1

    def test_move_right_past_end_allocates(self):
        tape = Tape()
        _walk(tape, BLOCK_WIDTH)
        assert tape.block_count == 2
        assert tape.offset == 0
        assert tape.read_cell() == 0

    def test_move_left_from_start_allocates(self):
        tape = Tape()
        tape.move_left()
        assert tape.block_count == 2
        assert tape.offset == BLOCK_WIDTH - 1
        assert tape.read_cell() == 0

    def test_left_then_right_is_lossless(self):
        tape = Tape()
        tape.set_cell(7)
        start_block = tape.block
        tape.move_left()
        tape.set_cell(9)
        tape.move_right()
        assert tape.block is start_block
        assert tape.offset == 0
        assert tape.read_cell() == 7
        tape.move_left()
        assert tape.read_cell() == 9

    def test_existing_neighbour_is_reused(self):
        tape = Tape()
        _walk(tape, BLOCK_WIDTH)
        _walk(tape, -BLOCK_WIDTH)
        _walk(tape, BLOCK_WIDTH)
        assert tape.block_count == 2

    def test_far_excursions_keep_values(self):
        tape = Tape()
        tape.set_cell(1)
        _walk(tape, -3 * BLOCK_WIDTH)
        tape.set_cell(2)
        _walk(tape, 6 * BLOCK_WIDTH)
        tape.set_cell(3)
        _walk(tape, -3 * BLOCK_WIDTH)
        assert tape.read_cell() == 1
        assert tape.block_count == 7

    def test_chain_links_are_consistent(self):
        tape = Tape()
        _walk(tape, -BLOCK_WIDTH)
        _walk(tape, 3 * BLOCK_WIDTH)
        blocks = list(tape.blocks())
        assert len(blocks) == tape.block_count == 4
        assert blocks[0].prev is None
        assert blocks[-1].next is None
        for left, right in zip(blocks, blocks[1:]):
            assert left.next is right
            assert right.prev is left


# ─── Dump ─────────────────────────────────

class TestDump:
    def test_dump_single_block(self):
        tape = Tape()
        tape.set_cell(3)
        lines = tape.dump().splitlines()
        assert lines[0] == "START OF TAPE"
        assert lines[-1] == "END OF TAPE"
        assert len(lines) == 3
        assert lines[1] == "[3]" + "[0]" * (BLOCK_WIDTH - 1)

    def test_dump_orders_blocks_left_to_right(self):
        tape = Tape()
        tape.set_cell(1)
        tape.move_left()
        tape.set_cell(2)
        _walk(tape, BLOCK_WIDTH + 1)
        tape.set_cell(3)
        lines = tape.dump().splitlines()[1:-1]
        assert len(lines) == 3
        assert lines[0].endswith("[2]")
        assert lines[1].startswith("[1]")
        assert lines[2].startswith("[3]")

    def test_dump_prints_signed_values(self):
        tape = Tape()
        tape.decrement_cell()
        tape.move_right()
        tape.set_cell(128)
        tape.move_right()
        tape.set_cell(127)
        assert tape.dump().splitlines()[1].startswith("[-1][-128][127][0]")

    def test_signed_keeps_storage_unsigned(self):
        tape = Tape()
        tape.decrement_cell()
        assert tape.read_cell() == 255
        assert signed(tape.read_cell()) == -1
        assert signed(0) == 0
        assert signed(127) == 127
        assert signed(128) == -128


# ─── Allocation and teardown ──────────────

class TestResources:
    def test_allocation_failure_raises_resource_error(self, monkeypatch):
        tape = Tape()

        def no_memory():
            raise MemoryError

        monkeypatch.setattr(tape_module, "Block", no_memory)
        with pytest.raises(ResourceError):
            tape.move_left()

    def test_failed_growth_leaves_cursor_in_place(self, monkeypatch):
        tape = Tape()
        tape.set_cell(5)

        def no_memory():
            raise MemoryError

        monkeypatch.setattr(tape_module, "Block", no_memory)
        with pytest.raises(ResourceError):
            tape.move_left()
        assert tape.offset == 0
        assert tape.read_cell() == 5
        assert tape.block_count == 1

    def test_release_unlinks_chain(self):
        tape = Tape()
        _walk(tape, 2 * BLOCK_WIDTH)
        blocks = list(tape.blocks())
        tape.release()
        assert tape.block_count == 0
        for block in blocks:
            assert block.prev is None
            assert block.next is None
