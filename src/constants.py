import os
import re

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_PARSE_ERROR = 2

# Written by a forked evaluation that hit exit/quit to its own channel,
# so every exit status a program returns stays an ordinary status.
EXIT_REQUEST = b"x"

FILE_MODE = 0o644
OPEN_READ = os.O_RDONLY
OPEN_TRUNC = os.O_WRONLY | os.O_CREAT | os.O_TRUNC
OPEN_APPEND = os.O_WRONLY | os.O_CREAT | os.O_APPEND

STDIN_FD = 0
STDOUT_FD = 1
STDERR_FD = 2

DEFAULT_PROMPT = "$ "
CONTINUATION_PROMPT = "> "

VAR_NAME_RX = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
# $NAME or ${NAME} inside a token
VAR_REF_RX = re.compile(r"\$(?:\{(?P<braced>[A-Za-z_][A-Za-z0-9_]*)\}|(?P<name>[A-Za-z_][A-Za-z0-9_]*))")
