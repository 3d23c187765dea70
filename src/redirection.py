""" Point the standard streams of a process at files. """
import contextlib
import logging
import os
import sys

from command import SimpleCommand
from constants import (
    FILE_MODE, OPEN_APPEND, OPEN_READ, OPEN_TRUNC,
    STDERR_FD, STDIN_FD, STDOUT_FD,
)
from exceptions import FatalError

logger = logging.getLogger(__name__)


def flush_std_streams():
    """ Push Python-level buffers out before descriptors are moved. """
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.flush()
        except (AttributeError, ValueError, OSError):
            # closed or replaced stream; nothing buffered for us
            pass


def open_fd(path: str, flags: int) -> int:
    try:
        return os.open(path, flags, FILE_MODE)
    except OSError as e:
        raise FatalError("open", f"{path}: {e.strerror}") from e


def dup_fd(fd: int) -> int:
    try:
        return os.dup(fd)
    except OSError as e:
        raise FatalError("dup", e.strerror) from e


def dup2_fd(fd: int, target: int):
    try:
        os.dup2(fd, target)
    except OSError as e:
        raise FatalError("dup2", e.strerror) from e


def close_fd(fd: int):
    try:
        os.close(fd)
    except OSError as e:
        raise FatalError("close", e.strerror) from e


def redirected_fds(cmd: SimpleCommand) -> list[int]:
    """ Standard descriptors a command's redirections will replace. """
    fds = []
    if cmd.stdin is not None:
        fds.append(STDIN_FD)
    if cmd.stdout is not None:
        fds.append(STDOUT_FD)
    if cmd.stderr is not None:
        fds.append(STDERR_FD)
    return fds


def move_fd(fd: int, target: int):
    """ dup2 `fd` onto `target`, then release `fd` whatever happens. """
    try:
        dup2_fd(fd, target)
    finally:
        close_fd(fd)


def open_mode(append: bool) -> int:
    return OPEN_APPEND if append else OPEN_TRUNC


def apply_redirections(cmd: SimpleCommand, state):
    """
    Set up stdin, stdout and stderr, in that order, from the command's
    redirection words. When stdout and stderr name the same file it is
    opened once and both descriptors share it.

    Raises FatalError if any open/dup/close fails.
    """
    if cmd.stdin is not None:
        path = cmd.stdin.resolve(state)
        move_fd(open_fd(path, OPEN_READ), STDIN_FD)
        logger.debug("stdin < %s", path)

    out_path = None
    if cmd.stdout is not None:
        out_path = cmd.stdout.resolve(state)
        move_fd(open_fd(out_path, open_mode(cmd.stdout_append)), STDOUT_FD)
        logger.debug("stdout %s %s", ">>" if cmd.stdout_append else ">", out_path)

    if cmd.stderr is not None:
        err_path = cmd.stderr.resolve(state)
        if out_path is not None and err_path == out_path:
            # &> : share stdout's open file description
            dup2_fd(STDOUT_FD, STDERR_FD)
        else:
            move_fd(open_fd(err_path, open_mode(cmd.stderr_append)), STDERR_FD)
        logger.debug("stderr %s %s", ">>" if cmd.stderr_append else ">", err_path)


def create_output(cmd: SimpleCommand, state):
    """ Create or truncate a command's stdout target without redirecting to it. """
    if cmd.stdout is None:
        return
    path = cmd.stdout.resolve(state)
    close_fd(open_fd(path, open_mode(cmd.stdout_append)))
    logger.debug("created %s", path)


@contextlib.contextmanager
def replaced_fd(target: int, source: int):
    """ Make `target` refer to `source` for the duration of the block. """
    flush_std_streams()
    saved = dup_fd(target)
    try:
        dup2_fd(source, target)
        yield
    finally:
        flush_std_streams()
        dup2_fd(saved, target)
        close_fd(saved)


@contextlib.contextmanager
def redirected(cmd: SimpleCommand, state):
    """
    Apply a command's redirections in the current process and put the
    original standard descriptors back afterwards.
    """
    fds = redirected_fds(cmd)
    if not fds:
        yield
        return

    flush_std_streams()
    saved = {}
    try:
        for fd in fds:
            saved[fd] = dup_fd(fd)
        apply_redirections(cmd, state)
        yield
    finally:
        flush_std_streams()
        for fd, copy in saved.items():
            dup2_fd(copy, fd)
            close_fd(copy)
