"""
Walk a command tree and run it.

Sequential and conditional operators run in the current process. Both
operands of `&` and both stages of `|` run in forked children that
evaluate their subtree and exit with its status.
"""
import logging
import os

from command import CommandNode, Operator, SimpleCommand
from constants import EXIT_SUCCESS, STDIN_FD, STDOUT_FD
from exceptions import FatalError
from redirection import close_fd, create_output, redirected, replaced_fd
from runner import SHELL_EXIT, execute_command, fork_child, wait_child
from shell_builtins import BUILTINS, EXIT_BUILTINS, OUTPUT_ONLY_BUILTINS, assign
from shell_state import ShellState

logger = logging.getLogger(__name__)


class Evaluator:
    def __init__(self, state: ShellState = None):
        self.state = state if state is not None else ShellState()
        self._strategies = {
            Operator.NONE: self._run_simple,
            Operator.SEQUENTIAL: self._run_sequential,
            Operator.PARALLEL: self._run_parallel,
            Operator.CONDITIONAL_NZERO: self._run_if_first_fails,
            Operator.CONDITIONAL_ZERO: self._run_if_first_succeeds,
            Operator.PIPE: self._run_on_pipe,
        }

    def evaluate(self, node: CommandNode):
        """
        Run `node` and return its exit status, or SHELL_EXIT if exit/quit
        was reached anywhere in the tree.
        """
        strategy = self._strategies.get(getattr(node, "op", None))
        if strategy is None:
            logger.error("unknown command node: %r", node)
            return SHELL_EXIT
        if node.op is Operator.NONE:
            status = strategy(node.scmd)
        else:
            status = strategy(node.left, node.right)
        if status is not SHELL_EXIT:
            self.state.set_status(status)
        return status

    # Leaves
    def _run_simple(self, cmd: SimpleCommand):
        if cmd.is_assignment():
            # redirections do not apply to assignments
            logger.debug("assignment %s", cmd.name)
            return assign(cmd, self.state)

        name = cmd.verb.resolve(self.state)
        func = BUILTINS.get(name)
        if func is None:
            return execute_command(cmd, self.state)
        if name in EXIT_BUILTINS:
            # no redirections: nothing after this runs
            return func([], self.state)

        args = [w.resolve(self.state) for w in cmd.params]
        logger.debug("builtin %s %r", name, args)
        if name in OUTPUT_ONLY_BUILTINS:
            create_output(cmd, self.state)
            return func(args, self.state)
        with redirected(cmd, self.state):
            return func(args, self.state)

    # ;
    def _run_sequential(self, left, right):
        status = self.evaluate(left)
        if status is SHELL_EXIT:
            return status
        return self.evaluate(right)

    # ||
    def _run_if_first_fails(self, left, right):
        status = self.evaluate(left)
        if status is SHELL_EXIT:
            return status
        if status == EXIT_SUCCESS:
            return EXIT_SUCCESS
        return self.evaluate(right)

    # &&
    def _run_if_first_succeeds(self, left, right):
        status = self.evaluate(left)
        if status is SHELL_EXIT or status != EXIT_SUCCESS:
            return status
        return self.evaluate(right)

    # &
    def _run_parallel(self, left, right):
        first = fork_child(lambda: self.evaluate(left))
        try:
            second = fork_child(lambda: self.evaluate(right))
        except BaseException:
            wait_child(first)
            raise

        try:
            status1 = wait_child(first)
        finally:
            # reaped even if the first wait was interrupted
            status2 = wait_child(second)
        return combine_parallel(status1, status2)

    # |
    def _run_on_pipe(self, left, right):
        try:
            read_fd, write_fd = os.pipe()
        except OSError as e:
            raise FatalError("pipe", e.strerror) from e

        try:
            writer = fork_child(lambda: self._pipe_stage(left, write_fd, STDOUT_FD, read_fd, write_fd))
            status = wait_child(writer)
            if status is SHELL_EXIT:
                return status

            reader = fork_child(lambda: self._pipe_stage(right, read_fd, STDIN_FD, read_fd, write_fd))
        finally:
            # the orchestrator never uses either end
            close_fd(read_fd)
            close_fd(write_fd)

        return wait_child(reader)

    def _pipe_stage(self, node, source, target, read_fd, write_fd):
        """ Child side of a pipe: evaluate `node` with `target` on the channel. """
        with replaced_fd(target, source):
            close_fd(read_fd)
            close_fd(write_fd)
            return self.evaluate(node)


def combine_parallel(status1, status2):
    """ 0 iff both operands succeeded; otherwise the first failing status. """
    if status1 is SHELL_EXIT or status2 is SHELL_EXIT:
        return SHELL_EXIT
    if status1 != EXIT_SUCCESS:
        return status1
    return status2


def evaluate(node: CommandNode, state: ShellState = None):
    return Evaluator(state).evaluate(node)
