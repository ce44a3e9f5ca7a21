import argparse
import os
import sys
from typing import List, Optional

from intp.intp_datatypes import IntpError
from intp.intp_printer import Printer
from intp.intp_runtime import ProgramRunner


def build_arg_parser() -> argparse.ArgumentParser:
    arg_parser = argparse.ArgumentParser(description="Evaluate an intp program tree")
    arg_parser.add_argument("path", nargs="?", help="program document to evaluate (stdin when omitted)")
    arg_parser.add_argument("--format", choices=["yaml", "json"], help="document format (detected when omitted)")
    arg_parser.add_argument("-a", "--ast", action="store_true", help="print the program before running it")
    arg_parser.add_argument("-p", "--print", dest="print_value", action="store_true", help="print the final value")
    return arg_parser


def main(argv: Optional[List[str]] = None, prog: Optional[str] = None) -> int:
    """Run a program from a file or stdin; returns the process exit status."""
    prog = prog or os.path.basename(sys.argv[0])
    args = build_arg_parser().parse_args(argv)
    filename = args.path or '-'
    runner = ProgramRunner(filename=filename)
    printer = Printer()

    try:
        if args.path:
            with open(args.path, encoding="utf-8") as f:
                source = f.read()
        else:
            source = sys.stdin.read()
        program = runner.load(source, args.format)
    except (OSError, UnicodeDecodeError, IntpError) as e:
        print(f"{prog}: {e}", file=sys.stderr)
        return 1

    if args.ast:
        print(printer.pformat(program))
        print()

    result = runner.run(program)
    if result.status == 'error':
        print(f"{prog}: {result.error_message}", file=sys.stderr)
        return 1
    if args.print_value:
        print(printer.pformat(result.value))
    return 0
