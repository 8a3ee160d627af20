#!/usr/bin/env python3
"""
bfi — brainfuck interpreter CLI

Usage:
    python bfi.py <program.bf> [-i] [-m] [--eof unchanged|0|-1] [--trace] [-v]

Output style:
    default   → each `.` writes the cell as a raw byte
    -i/--int  → each `.` writes the cell as a decimal number and a space

Examples:
    python bfi.py hello.bf
    python bfi.py count.bf -i -m          # print numbers, dump tape on halt
    echo hi | python bfi.py cat.bf --eof 0
    python bfi.py loop.bf --trace 2> trace.log

Differences from the original C interpreter's flags:
    -v        now raises log verbosity; the version is printed by --version
    -h        prints argparse help (no separate author banner)
    unknown flags are an error (exit 2) instead of a notice that is skipped
    a missing program file argument is an error (exit 2) instead of
    printing the help text and exiting 0
"""

import argparse
import logging
import sys
import os

# Allow running from project root or as module
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from bf_interpreter import __version__, load_file, execute
from bf_interpreter.engine import EofPolicy, PrintStyle
from bf_interpreter.errors import ResourceError, SourceReadError, StructuralError

logger = logging.getLogger("bfi")


def setup_logging(verbose: int, trace: bool):
    """Send log records to stderr so they never mix with program output."""
    if trace or verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter('%(levelname)s: %(name)s: %(message)s'))
    logging.basicConfig(level=level, handlers=[handler], force=True)


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="bfi",
        description="Brainfuck interpreter with an unbounded, bidirectional tape",
    )
    parser.add_argument("program", help="Brainfuck source file")
    parser.add_argument("-i", "--int", action="store_true",
                        help="Print data from the tape as base 10 numbers")
    parser.add_argument("-m", "--memory", action="store_true",
                        help="Print the tape after the program halts")
    parser.add_argument("--eof", default=EofPolicy.MINUS_ONE.value,
                        choices=[policy.value for policy in EofPolicy],
                        help="Value stored by ',' at end of input (default: -1)")
    parser.add_argument("--trace", action="store_true",
                        help="Log every executed instruction to stderr (slow)")
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="Increase log verbosity (-v, -vv)")
    parser.add_argument("--version", action="version",
                        version=f"bfi {__version__}")

    args = parser.parse_args(argv)
    setup_logging(args.verbose, args.trace)

    print_style = PrintStyle.INTEGER if args.int else PrintStyle.CHARACTER
    eof = EofPolicy(args.eof)

    try:
        program = load_file(args.program)
        logger.info(f"Loaded {args.program}: {len(program)} instructions "
                    f"from {program.source_lines} source line(s)")

        tape = execute(program, print_style, eof=eof, trace=args.trace)

        if args.memory:
            sys.stdout.write(tape.dump())
            sys.stdout.flush()
        logger.info(f"Halted with {tape.block_count} tape block(s) allocated")
        tape.release()

    except SourceReadError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except StructuralError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except ResourceError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        print(f"Internal interpreter error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(2)


if __name__ == "__main__":
    main()
