""" Registry of builtin commands. """
import os
import sys

from constants import EXIT_FAILURE, EXIT_SUCCESS, STDOUT_FD
from exceptions import FatalError
from runner import SHELL_EXIT

BUILTINS = {}
EXIT_BUILTINS = ("exit", "quit")
# run without redirections; only their stdout target is created
OUTPUT_ONLY_BUILTINS = ("cd",)


def builtin(name):
    """Decorator to register builtins"""
    def wrapper(func):
        BUILTINS[name] = func
        return func
    return wrapper


@builtin("cd")
def builtin_cd(args, state):
    if len(args) > 1:
        print("cd: too many arguments", file=sys.stderr)
        return EXIT_FAILURE
    if not args:
        return EXIT_SUCCESS

    target = args[0]
    try:
        os.chdir(target)
        return EXIT_SUCCESS
    except FileNotFoundError:
        print(f"cd: no such file or directory: {target}", file=sys.stderr)
    except NotADirectoryError:
        print(f"cd: not a directory: {target}", file=sys.stderr)
    except PermissionError:
        print(f"cd: permission denied: {target}", file=sys.stderr)
    # Indicate failure due to error
    return EXIT_FAILURE


@builtin("exit")
@builtin("quit")
def builtin_exit(args, state):
    return SHELL_EXIT


@builtin("pwd")
def builtin_pwd(args, state):
    try:
        path = os.getcwd()
    except OSError as e:
        raise FatalError("getcwd", e.strerror) from e
    # straight to the descriptor so redirections made with dup2 apply
    os.write(STDOUT_FD, os.fsencode(path + "\n"))
    return EXIT_SUCCESS


def assign(cmd, state) -> int:
    """ NAME=VALUE: set an environment variable, overwriting it. """
    state.set_var(cmd.verb.text, cmd.verb.assignment_value().resolve(state))
    return EXIT_SUCCESS
