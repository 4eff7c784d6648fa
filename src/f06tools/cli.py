"""CLI entry point for f06tools."""

import argparse
import logging
import sys
from pathlib import Path

from f06tools import __version__
from f06tools.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _load(path: Path):
    from f06tools.parser import OnePassParser

    if str(path) == "-":
        f06 = OnePassParser.parse_lines(sys.stdin, filename="<stdin>")
    else:
        f06 = OnePassParser.parse_file(path)
    f06.merge_blocks()
    f06.merge_potential_headers()
    return f06


def _check_file(path: Path):
    if str(path) != "-" and not path.is_file():
        print(f"Error: '{path}' does not exist or is not a file", file=sys.stderr)
        sys.exit(1)


def _run_info(args):
    from f06tools.report.json_report import file_to_dict, write_json
    from f06tools.report.terminal import render_file_info

    _check_file(args.file)
    f06 = _load(args.file)
    render_file_info(f06, no_color=args.no_color, show_headers=args.headers)
    if args.output:
        write_json(file_to_dict(f06), args.output)
        from rich.console import Console
        console = Console(force_terminal=not args.no_color)
        console.print(f"\n[dim]JSON dump saved to: {args.output}[/dim]")


def _run_diff(args):
    from f06tools.compare import Criteria, DisjunctionBehaviour
    from f06tools.diff import DiffSettings, F06Diff
    from f06tools.report.json_report import diff_to_dict, write_json
    from f06tools.report.terminal import render_diff

    if str(args.first) == "-":
        print("Error: only the second file can be read from stdin", file=sys.stderr)
        sys.exit(1)
    _check_file(args.first)
    _check_file(args.second)
    if args.max_flags is not None and args.max_flags < 0:
        print("Error: --max-flags cannot be negative", file=sys.stderr)
        sys.exit(1)

    criteria = Criteria(
        difference=args.difference,
        ratio=args.ratio,
        nan=not args.no_nan,
        inf=not args.no_inf,
        sig=args.signs,
    )
    if criteria.difference is None and criteria.ratio is None:
        logger.warning("No maximum difference or ratio given; only NaN/inf/sign checks will flag values.")
    settings = DiffSettings(
        criteria=criteria,
        dxn_behaviour=DisjunctionBehaviour.from_str(args.disjunction),
        max_flags=args.max_flags,
    )

    first = _load(args.first)
    second = _load(args.second)
    diff = F06Diff.compare(settings, first, second)
    render_diff(diff, print_max_flags=args.print_max_flags, no_color=args.no_color)
    if args.output:
        write_json(diff_to_dict(diff), args.output)
        from rich.console import Console
        console = Console(force_terminal=not args.no_color)
        console.print(f"\n[dim]JSON diff saved to: {args.output}[/dim]")
    if args.fail_on_flags and not diff.is_clean:
        sys.exit(2)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="f06tools",
        description="Extract and compare result tables from Nastran-like F06 files",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show detailed parsing progress",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write the log to this file",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored terminal output",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    info = sub.add_parser("info", help="Summarise the tables found in an F06 file")
    info.add_argument("file", type=Path, help="F06 file to read ('-' for stdin)")
    info.add_argument("-o", "--output", type=Path, default=None, help="Write a JSON dump to file")
    info.add_argument("--headers", action="store_true", help="List unrecognised headers")
    info.set_defaults(func=_run_info)

    diff = sub.add_parser("diff", help="Compare the tables of two F06 files")
    diff.add_argument("first", type=Path, help="First F06 file")
    diff.add_argument("second", type=Path, help="Second F06 file ('-' for stdin)")
    diff.add_argument("-d", "--difference", type=float, default=None,
                      help="Flag values whose absolute difference exceeds this")
    diff.add_argument("-r", "--ratio", type=float, default=None,
                      help="Flag values whose big-to-small magnitude ratio exceeds this")
    diff.add_argument("--no-nan", action="store_true", help="Do not flag NaNs")
    diff.add_argument("--no-inf", action="store_true", help="Do not flag infinities")
    diff.add_argument("--signs", action="store_true", help="Flag values with differing signs")
    diff.add_argument("--disjunction", choices=["skip", "zero", "flag"], default="zero",
                      help="Rows missing from one file: skip them, compare against zero, or flag them")
    diff.add_argument("--max-flags", type=int, default=None,
                      help="Keep at most this many flags per block")
    diff.add_argument("-p", "--print-max-flags", type=int, default=10,
                      help="Flags listed per block (0: summary only, negative: all)")
    diff.add_argument("-o", "--output", type=Path, default=None, help="Write the diff as JSON to file")
    diff.add_argument("--fail-on-flags", action="store_true",
                      help="Exit with status 2 if any value is flagged")
    diff.set_defaults(func=_run_diff)
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)
    args.func(args)


if __name__ == "__main__":
    main()
