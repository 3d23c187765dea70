""" Current state of the shell. """
import logging
import os

from constants import EXIT_SUCCESS
from exceptions import FatalError

logger = logging.getLogger(__name__)


class ShellState:
    """
    Variables live in the process environment, so every assignment is
    inherited by children forked afterwards and never by the parent.
    """
    def __init__(self, environ=None):
        self.environ = os.environ if environ is None else environ
        self.last_status = EXIT_SUCCESS

    def set_var(self, name: str, value: str):
        try:
            self.environ[name] = value
        except (OSError, ValueError) as e:
            raise FatalError("setenv", f"{name}: {e}") from e
        logger.debug("set %s=%r", name, value)

    def get_var(self, name: str) -> str:
        return self.environ.get(name, "")

    def set_status(self, status: int):
        # normalize like shells do
        self.last_status = int(status) & 0xFF if status is not None else EXIT_SUCCESS
