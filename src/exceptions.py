""" Exceptions raised by the shell. """


class FatalError(Exception):
    """
    An operating system primitive failed (fork, pipe, open, dup, close,
    wait, getcwd, setenv). The process that hit it cannot go on with the
    current command tree.
    """
    def __init__(self, operation, detail=None):
        self.operation = operation
        self.detail = detail
        message = f"{operation} failed"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ParseError(SyntaxError):
    """ The input line could not be turned into a command tree. """
