"""
Command line interface of ExIm.
"""
import argparse
import logging
import sys

from .errors import EximError, UsageError
from .pipeline import convert
from .resolver import resolve_request

CREDITS = (
    "ExIm for Etrian Odyssey, by Rea\n"
    "For exporting text table/MBM files to JSON, and importing JSON back into those formats.\n"
)

USAGE = """Usage: exim [mode] [input] [output] <-l / --long>

[mode] can be:
    -e, --export: Export text from a tbl/mbm file to JSON.
    -i, --import: Import text from a JSON file to tbl/mbm.
[input] is the path to the file you wish to import from.
[output] is the path to the file you wish to export to.
<-l / --long> is an optional argument, and indicates that the imported/exported tbl uses long pointers. Ignored for mbm files.

Other options:
    --legacy-envelope: Export only the text data after the type tag line.
    -v, --verbose: Show debug messages.

Note: if [output]'s directory does not exist, it will be created."""


class ArgumentParser(argparse.ArgumentParser):
    """Argument parser reporting errors as UsageError instead of exiting."""

    def error(self, message):
        raise UsageError(message[:1].upper() + message[1:] + ".")


def parse_inputs():
    """Build the console arguments parser."""
    parser = ArgumentParser(prog="exim", add_help=False)
    parser.add_argument("-e", "--export", action="store_true")
    parser.add_argument("-i", "--import", dest="import_", action="store_true")
    parser.add_argument("paths", nargs="*")
    parser.add_argument("-l", "--long", action="store_true")
    parser.add_argument("--legacy-envelope", action="store_true")
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("-h", "--help", action="store_true")
    return parser


def print_usage(print_basic_info):
    """
    Print usage information.

    :param bool print_basic_info: Also print the credits and description
    """
    if print_basic_info:
        print(CREDITS)
    print(USAGE)


def main(argv=None):
    """
    Run the command line.

    User errors print a message and the usage text, then return 0.
    Conversion and file system errors print a message and return 1.

    :param list[str] argv: Arguments, defaults to sys.argv[1:]
    :return int: Exit status
    """
    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        print_usage(True)
        return 0

    try:
        args = parse_inputs().parse_intermixed_args(argv)
        if args.help:
            print_usage(True)
            return 0
        logging.basicConfig(
            level=logging.DEBUG if args.verbose else logging.WARNING,
            format="%(levelname)s: %(message)s",
        )
        request = resolve_request(args)
        convert(request)
    except UsageError as exc:
        print(exc, file=sys.stderr)
        if exc.show_usage:
            print_usage(False)
        return 0
    except (EximError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


def run():
    """Console script entry point."""
    sys.exit(main())
