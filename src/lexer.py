""" Lexical analysis for shell commands. """
import shlex

from exceptions import ParseError

PUNCTUATION = ";&><|"
# longest first, so "&&" wins over "&" and "&>>" over "&>"
OPERATORS = ("&>>", "&&", "||", ">>", "&>", ";", "&", "|", "<", ">")


def split_operators(run: str) -> list[str]:
    """ Break a run of punctuation characters into known operators. """
    result = []
    i = 0
    while i < len(run):
        # every punctuation character is an operator by itself
        op = next(op for op in OPERATORS if run.startswith(op, i))
        result.append(op)
        i += len(op)
    return result


def tokenize(line: str) -> list[str]:
    lex = shlex.shlex(line, posix=True, punctuation_chars=PUNCTUATION)
    lex.whitespace_split = True
    lex.commenters = ""
    try:
        tokens = list(lex)
    except ValueError as e:
        # unbalanced quotes
        raise ParseError(str(e)) from e

    result = []
    for tok in tokens:
        if tok and all(c in PUNCTUATION for c in tok):
            result.extend(split_operators(tok))
        else:
            result.append(tok)
    return result
