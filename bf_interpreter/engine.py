"""
Execution engine — runs a validated `Program` against a fresh `Tape`.

Execution model:
  1. Fetch the symbol at ip
  2. Dispatch it: move the cursor, change the cell, or do I/O
  3. For `[` / `]`, scan the program to the matching bracket when the
     loop is skipped or repeated
  4. Stop when ip reaches the END sentinel

Loop targets are found by scanning every time a jump is taken; nothing is
precomputed. The scans rely on the loader having balanced the brackets
and do no bounds checking of their own.

The only blocking points are `.` and `,`, which wait on the output and
input streams.
"""

from __future__ import annotations
import enum
import logging
import sys
from typing import BinaryIO, Optional

from .loader import (
    END, INPUT, LOOP_CLOSE, LOOP_OPEN, MOVE_LEFT, MOVE_RIGHT, OUTPUT,
    DECREMENT, INCREMENT, Program,
)
from .tape import CELL_MASK, Tape, signed

logger = logging.getLogger(__name__)


class PrintStyle(enum.Enum):
    CHARACTER = "character"   # raw byte per `.`
    INTEGER = "integer"       # decimal value and a space per `.`


class EofPolicy(enum.Enum):
    """What `,` stores once the input stream is exhausted."""
    UNCHANGED = "unchanged"
    ZERO = "0"
    MINUS_ONE = "-1"


class Engine:
    """Instruction-dispatch loop for one program run.

    Usage:
        engine = Engine(compile_source("+++."), stdout=buf)
        engine.run()
        engine.tape.read_cell()  # 3
    """

    def __init__(self, program: Program, *,
                 print_style: PrintStyle = PrintStyle.CHARACTER,
                 eof: EofPolicy = EofPolicy.MINUS_ONE,
                 stdin: Optional[BinaryIO] = None,
                 stdout: Optional[BinaryIO] = None,
                 trace: bool = False):
        self.program = program
        self.print_style = print_style
        self.eof = eof
        self.stdin = stdin if stdin is not None else sys.stdin.buffer
        self.stdout = stdout if stdout is not None else sys.stdout.buffer
        self.trace = trace

        self._code = program.instructions + END
        self.ip = 0
        self.steps = 0
        self.tape = Tape()

    @property
    def halted(self) -> bool:
        return self._code[self.ip] == END

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def step(self) -> bool:
        """Execute one instruction. Returns False once the program has halted.

        ResourceError from tape growth propagates; output written so far
        is not undone.
        """
        op = self._code[self.ip]
        if op == END:
            return False

        tape = self.tape
        if self.trace:
            logger.debug(f"ip={self.ip:<6d} op={op} offset={tape.offset:<2d} cell={tape.read_cell()}")

        if op == MOVE_RIGHT:
            tape.move_right()
            self.ip += 1
        elif op == MOVE_LEFT:
            tape.move_left()
            self.ip += 1
        elif op == INCREMENT:
            tape.increment_cell()
            self.ip += 1
        elif op == DECREMENT:
            tape.decrement_cell()
            self.ip += 1
        elif op == OUTPUT:
            self._write(tape.read_cell())
            self.ip += 1
        elif op == INPUT:
            self._read()
            self.ip += 1
        elif op == LOOP_OPEN:
            if tape.read_cell() != 0:
                self.ip += 1
            else:
                self._skip_loop()
        elif op == LOOP_CLOSE:
            if tape.read_cell() == 0:
                self.ip += 1
            else:
                self._repeat_loop()

        self.steps += 1
        return True

    def run(self):
        """Run until the END sentinel is reached."""
        logger.debug(f"Running {len(self.program)} instructions ({self.print_style.value} output)")
        while self.step():
            pass
        logger.debug(f"Halted after {self.steps} steps, {self.tape.block_count} tape block(s)")

    # ══════════════════════════════════════════════
    # Loop jumps
    # ══════════════════════════════════════════════

    def _skip_loop(self):
        """Move ip just past the `]` matching the `[` at ip."""
        code = self._code
        depth = 1
        ip = self.ip + 1
        while depth > 0:
            op = code[ip]
            if op == LOOP_OPEN:
                depth += 1
            elif op == LOOP_CLOSE:
                depth -= 1
            ip += 1
        self.ip = ip

    def _repeat_loop(self):
        """Move ip just past the `[` matching the `]` at ip."""
        code = self._code
        depth = 1
        ip = self.ip - 1
        while True:
            op = code[ip]
            if op == LOOP_CLOSE:
                depth += 1
            elif op == LOOP_OPEN:
                depth -= 1
                if depth == 0:
                    break
            ip -= 1
        self.ip = ip + 1

    # ══════════════════════════════════════════════
    # I/O
    # ══════════════════════════════════════════════

    def _write(self, value: int):
        if self.print_style is PrintStyle.INTEGER:
            self.stdout.write(f"{signed(value)} ".encode("ascii"))
        else:
            self.stdout.write(bytes((value,)))
        self.stdout.flush()

    def _read(self):
        data = self.stdin.read(1)
        if data:
            self.tape.set_cell(data[0])
        elif self.eof is EofPolicy.ZERO:
            self.tape.set_cell(0)
        elif self.eof is EofPolicy.MINUS_ONE:
            self.tape.set_cell(-1 & CELL_MASK)
        # EofPolicy.UNCHANGED leaves the cell alone


def execute(program: Program, print_style: PrintStyle = PrintStyle.CHARACTER, *,
            eof: EofPolicy = EofPolicy.MINUS_ONE,
            stdin: Optional[BinaryIO] = None,
            stdout: Optional[BinaryIO] = None,
            trace: bool = False) -> Tape:
    """Run `program` to completion and return its final tape.

    A single newline is written after the program halts. The caller owns
    the returned tape and should `release()` it once any dump is done.
    """
    engine = Engine(program, print_style=print_style, eof=eof,
                    stdin=stdin, stdout=stdout, trace=trace)
    engine.run()
    engine.stdout.write(b"\n")
    engine.stdout.flush()
    return engine.tape
