"""
Loader / validator for brainfuck source text.

Converts raw source into a compact `Program`: every character that is not
one of the eight instruction symbols is a comment and is dropped. Bracket
nesting is checked in the same pass so the engine never sees an
unbalanced program.

Newlines are only counted so errors can name a source line.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Union

from .errors import ResourceError, SourceReadError, StructuralError

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────
# Instruction set
# ──────────────────────────────────────────────

MOVE_RIGHT = ">"
MOVE_LEFT = "<"
INCREMENT = "+"
DECREMENT = "-"
OUTPUT = "."
INPUT = ","
LOOP_OPEN = "["
LOOP_CLOSE = "]"

INSTRUCTIONS = frozenset("><+-.,[]")

# Terminates the instruction stream inside the engine.
END = "\0"


# ──────────────────────────────────────────────
# Program
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class Program:
    """Validated instruction stream. Brackets are always balanced."""
    instructions: str
    source_lines: int = 1

    def __len__(self) -> int:
        return len(self.instructions)

    def __getitem__(self, index):
        return self.instructions[index]

    def __iter__(self) -> Iterator[str]:
        return iter(self.instructions)

    def __str__(self) -> str:
        return self.instructions


# ──────────────────────────────────────────────
# Loader
# ──────────────────────────────────────────────

class Loader:
    """Validates and compacts source text into a `Program`."""

    def __init__(self, source: Union[str, bytes]):
        if isinstance(source, (bytes, bytearray)):
            source = bytes(source).decode("utf-8", errors="replace")
        self.source = source

    def load(self) -> Program:
        """Scan the source once and return the compacted program.

        Raises StructuralError on the first closing bracket with no open
        loop, or after the scan when loops are left open.
        """
        line = 1
        depth = 0
        last_open_line = 0
        last_close_line = 0
        kept: List[str] = []

        try:
            for ch in self.source:
                if ch == "\n":
                    line += 1
                    continue
                if ch not in INSTRUCTIONS:
                    continue
                if ch == LOOP_OPEN:
                    depth += 1
                    last_open_line = line
                elif ch == LOOP_CLOSE:
                    depth -= 1
                    last_close_line = line
                    if depth < 0:
                        raise StructuralError("Unmatched bracket", last_close_line, LOOP_CLOSE)
                kept.append(ch)

            # depth cannot be negative here; the scan stops on the first stray ]
            if depth > 0:
                raise StructuralError("Unmatched bracket", last_open_line, LOOP_OPEN)

            program = Program("".join(kept), source_lines=line)
        except MemoryError:
            raise ResourceError("Insufficient memory for the instruction stream") from None

        logger.debug(f"Loaded {len(program)} instructions from {line} source line(s)")
        return program


def compile_source(source: Union[str, bytes]) -> Program:
    """Validate `source` and return its compacted instruction stream."""
    return Loader(source).load()


def load_file(path: Union[str, Path]) -> Program:
    """Read a source file fully into memory and compile it.

    Raises SourceReadError if the file cannot be opened or read and
    ResourceError if it does not fit in memory.
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except MemoryError:
        raise ResourceError() from None
    except OSError as e:
        raise SourceReadError(str(path), e.strerror or str(e)) from e

    logger.debug(f"Read {len(data)} bytes from {path}")
    return compile_source(data)
