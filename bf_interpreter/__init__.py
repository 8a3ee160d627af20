"""
bf_interpreter — a small brainfuck interpreter
==============================================
Runs programs written in the eight-instruction tape language on an
unbounded tape of 8-bit wrapping cells.

Architecture:
    ┌──────────┐    ┌──────────┐    ┌───────────┐    ┌──────────┐
    │  Source  │───>│  Loader  │───>│  Engine   │───>│  Output  │
    │  (.bf)   │    │ (Program)│    │ (dispatch)│    │  (bytes) │
    └──────────┘    └──────────┘    └─────┬─────┘    └──────────┘
                                          │
                                    ┌─────┴─────┐
                                    │   Tape    │
                                    │ (blocks)  │
                                    └───────────┘

    - loader.py: strips comments, checks bracket nesting, builds a Program
    - tape.py:   doubly-linked chain of 64-cell blocks with one cursor
    - engine.py: instruction loop; loop jumps rescan for the matching bracket
    - errors.py: StructuralError, ResourceError, SourceReadError
"""

__version__ = "1.1.0"

from .errors import BFError, ResourceError, SourceReadError, StructuralError
from .loader import Loader, Program, compile_source, load_file
from .tape import BLOCK_WIDTH, Block, Tape
from .engine import Engine, EofPolicy, PrintStyle, execute


def run_source(source, *, print_style: PrintStyle = PrintStyle.CHARACTER,
               eof: EofPolicy = EofPolicy.MINUS_ONE, stdin=None, stdout=None) -> Tape:
    """Compile and execute source text in one call.

    Full pipeline: Loader -> Program -> Engine. Returns the final tape.
    """
    program = compile_source(source)
    return execute(program, print_style, eof=eof, stdin=stdin, stdout=stdout)
