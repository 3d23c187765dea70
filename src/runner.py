""" Run commands in child processes. """
import logging
import os
import traceback

from command import SimpleCommand
from constants import EXIT_FAILURE, EXIT_REQUEST, EXIT_SUCCESS, STDERR_FD
from exceptions import FatalError
from redirection import apply_redirections, close_fd, flush_std_streams

logger = logging.getLogger(__name__)


class _ShellExit:
    """ Out-of-band result of exit/quit; never a numeric status. """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "SHELL_EXIT"


SHELL_EXIT = _ShellExit()


def report_fatal(err: FatalError):
    os.write(STDERR_FD, f"treesh: {err}\n".encode())


class Child:
    """ A forked evaluation: its pid and the read end of its exit-request channel. """
    def __init__(self, pid: int, channel: int):
        self.pid = pid
        self.channel = channel

    def __repr__(self):
        return f"Child(pid={self.pid})"


def fork_child(body) -> Child:
    """
    Fork and run `body()` in the child. The child leaves through os._exit
    with the body's result; it never returns into the caller. A SHELL_EXIT
    result is written to the child's channel instead of its exit status.
    """
    flush_std_streams()
    try:
        channel, request_fd = os.pipe()
    except OSError as e:
        raise FatalError("pipe", e.strerror) from e
    try:
        pid = os.fork()
    except OSError as e:
        close_fd(channel)
        close_fd(request_fd)
        raise FatalError("fork", e.strerror) from e

    if pid == 0:
        code = EXIT_FAILURE
        try:
            os.close(channel)
            result = body()
            if result is SHELL_EXIT:
                os.write(request_fd, EXIT_REQUEST)
                code = EXIT_SUCCESS
            else:
                code = int(result) & 0xFF
        except FatalError as err:
            report_fatal(err)
        except BaseException:
            traceback.print_exc()
        finally:
            flush_std_streams()
            os._exit(code)

    close_fd(request_fd)
    logger.debug("forked child %d", pid)
    return Child(pid, channel)


def _waitpid(pid: int) -> int:
    """ waitpid that still reaps `pid` when interrupted, then re-raises. """
    interrupted = None
    while True:
        try:
            _, status = os.waitpid(pid, 0)
            break
        except KeyboardInterrupt as e:
            interrupted = e
        except OSError as e:
            raise FatalError("wait", e.strerror) from e
    if interrupted is not None:
        raise interrupted
    return status


def _exit_requested(channel: int) -> bool:
    # the child has terminated, so anything it wrote is already buffered
    os.set_blocking(channel, False)
    try:
        return os.read(channel, len(EXIT_REQUEST)) == EXIT_REQUEST
    except BlockingIOError:
        return False
    except OSError as e:
        raise FatalError("read", e.strerror) from e


def wait_child(child: Child):
    """
    Block until `child` terminates. Returns its exit status, or SHELL_EXIT
    if its evaluation reached exit/quit.
    """
    try:
        status = _waitpid(child.pid)
        requested = _exit_requested(child.channel)
    finally:
        close_fd(child.channel)

    if requested:
        logger.debug("child %d requested shell exit", child.pid)
        return SHELL_EXIT
    code = os.waitstatus_to_exitcode(status)
    if code < 0:
        # killed by a signal
        code = 128 - code
    logger.debug("child %d exited with %d", child.pid, code)
    return code


def _exec_command(cmd: SimpleCommand, state):
    """ Child side of execute_command. Returns only if exec failed. """
    if cmd.has_redirections():
        apply_redirections(cmd, state)

    argv = cmd.argv(state)
    try:
        os.execvpe(argv[0], argv, state.environ)
    except OSError:
        os.write(STDERR_FD, f"Execution failed for '{argv[0]}'\n".encode())
    return EXIT_FAILURE


def execute_command(cmd: SimpleCommand, state) -> int:
    """ Fork, redirect and exec an external program, then wait for it. """
    return wait_child(fork_child(lambda: _exec_command(cmd, state)))
