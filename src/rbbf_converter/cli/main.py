"""
Command-line entry point: ``rbbf2xml INPUT [OUTPUT]``.

If OUTPUT is omitted, the XML document is written to stdout and the console switches to pipe mode, so that only
warnings and errors (on stderr) accompany it.

Exit status:

- 0: success, or the input file does not exist (a message is shown)
- 2: the input is not a valid RBBF file
- 3: the input contains a block type (or top-level tag) that the converter does not know
- -1: unexpected failure (a trace is shown)
"""

import logging

from argparse import ArgumentParser, Namespace
from pathlib import Path
from typing import List, Optional

from .. import __version__
from ..converter import ConversionResult, convert_file
from ..errors import RBBFConverterError
from ..options import ConvertOptions, TrailerPolicy
from .console import console
from .errors import EXIT_OK, descriptive_errors, describe_error, exit_status_for, fail, pretty_unhandled


def build_argument_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog='rbbf2xml',
        description="Converts a REALbasic/Xojo binary project file (RBBF) to an equivalent XML document.",
    )

    parser.add_argument('input', metavar='INPUT', help="the binary project file to convert")
    parser.add_argument(
        'output', metavar='OUTPUT', nargs='?', default=None,
        help="where to write the XML document (default: standard output)",
    )

    trailers = parser.add_mutually_exclusive_group()
    trailers.add_argument(
        '--strict-trailers', dest='trailer_policy', action='store_const', const=TrailerPolicy.FAIL,
        help="treat a group whose closing ID does not match its opening ID as a decoding error",
    )
    trailers.add_argument(
        '--ignore-trailers', dest='trailer_policy', action='store_const', const=TrailerPolicy.IGNORE,
        help="do not check group closing IDs at all",
    )

    parser.add_argument(
        '--fail-fast', action='store_true',
        help="abort the whole conversion at the first block that cannot be decoded",
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('-v', '--verbose', action='store_true', help="show debug messages")
    verbosity.add_argument('-q', '--quiet', action='store_true', help="show only warnings and errors")

    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")

    parser.set_defaults(trailer_policy=TrailerPolicy.WARN)

    return parser


def setup_logging(args: Namespace):
    level = logging.DEBUG if args.verbose else logging.WARNING if args.quiet else logging.INFO

    logging.basicConfig(
        level=level,
        style='{',
        format='[{asctime}] {levelname}: {message}',
        datefmt='%Y-%m-%d %H:%M:%S',
    )


def options_from_args(args: Namespace) -> ConvertOptions:
    return ConvertOptions(trailer_policy=args.trailer_policy, fail_fast=args.fail_fast)


@pretty_unhandled
def main(argv: Optional[List[str]] = None) -> int:
    args = build_argument_parser().parse_args(argv)
    setup_logging(args)

    output_path = Path(args.output) if (args.output is not None) and (args.output.strip() != '') else None
    if output_path is None:
        console.pipe_mode()
    else:
        console.enable_stdout()

    input_path = Path(args.input)
    if not input_path.exists():
        console.print_warning("Input file does not exist")
        return EXIT_OK
    if input_path.is_dir():
        fail(f"Input path {str(input_path)!r} is a directory, not a file")
    if (output_path is not None) and output_path.is_dir():
        fail(f"Output path {str(output_path)!r} is a directory")

    console.print_progress(f"Converting {str(input_path)!r}...")

    try:
        with descriptive_errors(OSError):
            result = convert_file(input_path, output_path, options_from_args(args))
    except RBBFConverterError as e:
        console.print_error(describe_error(e))
        return exit_status_for(e)

    _report_result(result, output_path)

    return EXIT_OK


def _report_result(result: ConversionResult, output_path: Optional[Path]):
    if result.n_blocks_failed > 0:
        console.print_warning(f"{result.n_blocks_failed} block(s) could not be fully decoded")
    if len(result.trailer_mismatches) > 0:
        console.print_warning(f"{len(result.trailer_mismatches)} group(s) had mismatched closing IDs")
    for warning in result.warnings:
        console.print_warning(warning)

    if output_path is not None:
        console.print_success(
            f"Converted {result.n_blocks} block(s) of project version {result.version} to {str(output_path)!r}"
        )
