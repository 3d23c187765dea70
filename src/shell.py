""" Implement the read-evaluate loop of the shell. """
import logging
import os
import sys

from constants import CONTINUATION_PROMPT, DEFAULT_PROMPT, EXIT_FAILURE, EXIT_PARSE_ERROR, EXIT_SUCCESS
from evaluator import Evaluator
from exceptions import FatalError, ParseError
from lexer import tokenize
from parser import parse_line
from runner import SHELL_EXIT
from shell_state import ShellState

logger = logging.getLogger(__name__)


def read_command(prompt=None):
    """ Read a command with support for line continuation. """
    if prompt is None:
        prompt = os.environ.get("PS1", DEFAULT_PROMPT)
    lines = []
    while True:
        line = input(prompt)
        if line.endswith("\\"):
            lines.append(line[:-1])
            prompt = CONTINUATION_PROMPT
        else:
            lines.append(line)
            break
    return "".join(lines)


class Shell:
    def __init__(self, state: ShellState = None):
        self.state = state if state is not None else ShellState()
        self.evaluator = Evaluator(self.state)

    def run_line(self, line: str):
        """
        Parse and evaluate one line. Returns its status, or SHELL_EXIT.
        ParseError and FatalError propagate to the caller.
        """
        tree = parse_line(tokenize(line))
        if tree is None:
            return self.state.last_status
        logger.debug("evaluating %r", tree)
        return self.evaluator.evaluate(tree)

    def run(self) -> int:
        while True:
            try:
                line = read_command()
                if self.run_line(line) is SHELL_EXIT:
                    return self.state.last_status

            except ParseError as e:
                print(f"treesh: {e.msg}", file=sys.stderr)
                self.state.set_status(EXIT_PARSE_ERROR)

            except FatalError as e:
                print(f"treesh: {e}", file=sys.stderr)
                return EXIT_FAILURE

            except EOFError:
                print()
                return EXIT_SUCCESS

            except KeyboardInterrupt:
                print()
