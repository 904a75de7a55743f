#!/usr/bin/env python3
"""
Whitespace Language - Main Entry Point
Runs a Whitespace source file
"""

import sys
from typing import List, Optional

from .parser import ParseError
from .compiler import compile_program
from .vm import VM, RuntimeError as VMRuntimeError
from .helpers import trace_enabled

VERSION = "0.1.0"

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_INTERRUPTED = 130

def usage(prog: str = "wspace") -> str:
    return f"""wspace {VERSION} - Whitespace interpreter

Usage:
  {prog} FILE         Run a Whitespace source file
  {prog} --help       Show this help
  {prog} --version    Show version
"""

def run_file(filepath: str, stdin=None, stdout=None) -> int:
    """Execute a Whitespace source file, returning the exit status"""
    try:
        with open(filepath, 'rb') as f:
            source = f.read()
    except OSError as e:
        print(f"Error: cannot read {filepath}: {e.strerror}", file=sys.stderr)
        return EXIT_USAGE

    try:
        program = compile_program(source)
        VM(program, stdin=stdin, stdout=stdout, trace=trace_enabled()).run()
    except ParseError as e:
        print(f"Parse error: {e}", file=sys.stderr)
        return e.exit_code
    except VMRuntimeError as e:
        print(f"Runtime error: {e}", file=sys.stderr)
        return e.exit_code
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return EXIT_INTERRUPTED
    return EXIT_OK

def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv

    if len(args) != 1:
        print(usage(), file=sys.stderr)
        return EXIT_USAGE
    if args[0] in ('--help', '-h'):
        print(usage())
        return EXIT_OK
    if args[0] in ('--version', '-v'):
        print(f"wspace {VERSION}")
        return EXIT_OK
    return run_file(args[0])

if __name__ == "__main__":
    sys.exit(main())
