""" Command-line entry point. """
import argparse
import logging
import os
import sys

from constants import EXIT_FAILURE, EXIT_PARSE_ERROR
from exceptions import FatalError, ParseError
from runner import SHELL_EXIT
from shell import Shell


def build_arg_parser():
    parser = argparse.ArgumentParser(
        prog="treesh",
        description="A minimal shell: sequences, pipes, conditionals and parallel commands."
    )
    parser.add_argument(
        "-c",
        metavar="COMMAND",
        dest="command",
        help="run COMMAND and exit with its status"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=bool(os.environ.get("TREESH_DEBUG")),
        help="log forks, waits and redirections to stderr (also: TREESH_DEBUG=1)"
    )
    return parser


def main(argv=None):
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(process)d %(name)s %(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    sh = Shell()
    if args.command is None:
        sys.exit(sh.run())

    try:
        status = sh.run_line(args.command)
    except ParseError as e:
        print(f"treesh: {e.msg}", file=sys.stderr)
        sys.exit(EXIT_PARSE_ERROR)
    except FatalError as e:
        print(f"treesh: {e}", file=sys.stderr)
        sys.exit(EXIT_FAILURE)

    sys.exit(sh.state.last_status if status is SHELL_EXIT else status)


if __name__ == "__main__":
    main()
