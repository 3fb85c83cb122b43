"""
fmtexpand command-line driver.

Usage: fmtexpand MACRO [BODY] [-f FILE] [--map] [--check] [--verbose]
"""

import argparse
import sys
from typing import List, Optional

from .expander import BuiltinMacroExpander, ExpansionOutcome


def log(message: str, verbose: bool):
    """Print log message if verbose mode is enabled."""
    if verbose:
        print(f"[fmtexpand] {message}", file=sys.stderr)


def read_body(args) -> str:
    """Body from the command line, a file, or stdin (one trailing newline dropped)."""
    if args.body is not None and args.body != '-':
        return args.body
    if args.file:
        with open(args.file, encoding='utf-8') as f:
            text = f.read()
    else:
        text = sys.stdin.read()
    return text[:-1] if text.endswith('\n') else text


def print_mapping(outcome: ExpansionOutcome):
    for src_start, length, dst_start in outcome.ranges.as_tuples():
        text = outcome.text[dst_start:dst_start + length]
        print(f"{src_start} {length} {dst_start} {text!r}")


def print_failure(outcome: ExpansionOutcome):
    print(f"{outcome.failure.value}: {outcome.message}", file=sys.stderr)
    for diagnostic in outcome.diagnostics:
        print(f"  {diagnostic}", file=sys.stderr)


def main(argv: Optional[List[str]] = None):
    """Command-line interface for the expander."""
    parser = argparse.ArgumentParser(
        prog='fmtexpand',
        description='Expand a format_args!-style macro call, making implicit captures explicit'
    )
    parser.add_argument('macro', help='Macro name, e.g. format_args (a trailing ! is ignored)')
    parser.add_argument('body', nargs='?',
                        help="Text between the macro's parentheses ('-' or omitted: read stdin)")
    parser.add_argument('-f', '--file', help='Read the macro body from a file')
    parser.add_argument('--map', action='store_true',
                        help='Print the offset mapping after the expanded text')
    parser.add_argument('--check', action='store_true',
                        help='Verify that every mapped range shows the same text on both sides')
    parser.add_argument('--verbose', action='store_true',
                        help='Verbose output')

    args = parser.parse_args(argv)

    macro_name = args.macro.rstrip('!')
    try:
        body = read_body(args)
    except OSError as e:
        print(f"Cannot read macro body: {e}", file=sys.stderr)
        sys.exit(1)

    log(f"Expanding {macro_name}! ({len(body)} characters)", args.verbose)
    outcome = BuiltinMacroExpander(verbose=args.verbose).expand(macro_name, body)

    if not outcome.ok:
        print_failure(outcome)
        sys.exit(1)

    print(outcome.text)
    if args.map:
        print_mapping(outcome)

    if args.check:
        if not outcome.ranges.validate(body, outcome.text):
            print("Mapping check failed: mapped ranges differ", file=sys.stderr)
            sys.exit(1)
        log(f"Mapping check passed for {len(outcome.ranges)} ranges", args.verbose)

    sys.exit(0)


if __name__ == '__main__':
    main()
