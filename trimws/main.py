"""
Main module for trimws.

Contains the main function and argument parsing for the trimws command-line interface.
"""

import argparse
import sys

from argparse_formatter import FlexiFormatter

from ._version import __version__
from .batch import outcomes_table, run_batch, trim_stream, write_summary_csv
from .core import green, red, stream_supports_colour, yellow
from .replace import AtomicFileReplacer

STDIN_MARKER = "-"


def create_parser():
    """Create and return the argument parser."""

    parser = argparse.ArgumentParser(
        prog="trimws",
        description=(
            "trimws: trim trailing whitespace and trailing blank lines.\n\n"
            "Trimmed text goes to stdout and a visualization of the removed "
            "whitespace to stderr, unless --in-place is given."
        ),
        formatter_class=FlexiFormatter,
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "files",
        nargs="*",
        help="Files to trim; if '-' is given or no files are provided, stdin is used",
    )

    trim_group = parser.add_argument_group("Trim options")
    trim_group.add_argument(
        "-i",
        "--in-place",
        action="store_true",
        default=False,
        help="Trim files in place, replacing their content atomically",
    )
    trim_group.add_argument(
        "-N",
        "--suppress-newline",
        action="store_true",
        default=False,
        help="Do not end the last line with a newline",
    )
    trim_group.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=None,
        help="Number of files trimmed concurrently with --in-place",
    )

    report_group = parser.add_argument_group("Report options")
    report_group.add_argument(
        "-S",
        "--suppress-summary",
        action="store_true",
        default=False,
        help="Do not print the byte-savings summary",
    )
    report_group.add_argument(
        "-V",
        "--suppress-visual",
        action="store_true",
        default=False,
        help="Do not print the visualization of the trimmed whitespace",
    )
    report_group.add_argument(
        "--summary-csv",
        default=None,
        help="Also write the per-file summary to this CSV file",
    )
    report_group.add_argument(
        "--no-colour",
        "--no-color",
        dest="no_colour",
        action="store_true",
        default=False,
        help="Disable ANSI colours on stderr",
    )
    report_group.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Print tracebacks for unexpected errors",
    )

    return parser


def main(sysargs=None):
    """Entry point for the trimws CLI."""
    if sysargs is None:
        sysargs = sys.argv[1:]

    parser = create_parser()

    try:
        args = parser.parse_args(sysargs)
        use_stdin = not args.files or STDIN_MARKER in args.files
        if args.in_place and use_stdin:
            parser.error("--in-place needs file arguments; stdin cannot be edited in place")
        if args.jobs is not None and args.jobs < 1:
            parser.error("--jobs must be at least 1")
    except SystemExit as exc:
        code = exc.code if isinstance(exc.code, int) else 0
        return code

    try:
        return _run_trim(args, use_stdin)
    except Exception as e:
        print(f"\nUnexpected error: {str(e)}\n", file=sys.stderr)
        if args.debug:
            import traceback

            traceback.print_exc()
        return 1


def _run_trim(args, use_stdin):
    colour = not args.no_colour and stream_supports_colour(sys.stderr)
    visual = None if (args.suppress_visual or args.in_place) else sys.stderr
    files = [f for f in args.files if f != STDIN_MARKER]

    outcomes = {}
    if use_stdin:
        stdin = getattr(sys.stdin, "buffer", sys.stdin)
        outcome = trim_stream(
            stdin,
            sys.stdout,
            visual,
            args.suppress_newline,
            colour=colour,
        )
        outcomes[outcome.path] = outcome
    if files:
        outcomes.update(
            run_batch(
                files,
                args.in_place,
                args.suppress_newline,
                output=sys.stdout,
                visual=visual,
                replacer=AtomicFileReplacer(),
                max_workers=args.jobs,
                colour=colour,
            )
        )

    failed = [outcome for outcome in outcomes.values() if not outcome.ok]
    for outcome in failed:
        print(red(f"ERROR: {outcome.error.describe()}", colour), file=sys.stderr)

    if args.summary_csv:
        write_summary_csv(outcomes, args.summary_csv)

    if not args.suppress_summary:
        _print_summary(outcomes, colour)

    return 1 if failed else 0


def _print_summary(outcomes, colour):
    table = outcomes_table(outcomes)
    if len(table) > 1:
        print(file=sys.stderr)
        print(table.to_string(index=False), file=sys.stderr)

    paint = green if (table["status"] == "trimmed").all() else yellow
    dropped = int(table["newlines_dropped"].sum())
    saved = int(table["bytes_saved"].sum())
    print(file=sys.stderr)
    print(paint(f"{dropped:>6} trailing newlines trimmed", colour), file=sys.stderr)
    print(paint(f"{saved:>6} bytes saved overall", colour), file=sys.stderr)


if __name__ == "__main__":
    sys.exit(main())
