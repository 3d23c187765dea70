""" Parse tokens into a command tree. """
from command import CommandNode, Operator, SimpleCommand
from constants import VAR_NAME_RX
from exceptions import ParseError
from word import Word, WordPart

# loosest binding first
PRECEDENCE = [
    {";": Operator.SEQUENTIAL},
    {"&": Operator.PARALLEL},
    {"&&": Operator.CONDITIONAL_ZERO, "||": Operator.CONDITIONAL_NZERO},
    {"|": Operator.PIPE},
]
CONTROL_OPERATORS = {";", "&", "&&", "||", "|"}
# may end a line without a right-hand side
TRAILING_OPERATORS = {";", "&"}
REDIRECTIONS = {"<", ">", ">>", "&>", "&>>"}


def is_assignment_token(tok: str) -> bool:
    """ Return True if tok looks like NAME=value with a valid NAME. """
    if "=" not in tok or tok.startswith("="):
        return False
    name, _ = tok.split("=", 1)
    return bool(VAR_NAME_RX.match(name))


def assignment_word(tok: str) -> Word:
    name, value = tok.split("=", 1)
    return Word([WordPart(name), WordPart("=")] + list(Word.from_token(value).parts))


class _Parser:
    def __init__(self, tokens: list[str]):
        self.tokens = tokens
        self.pos = 0

    def peek(self):
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def next(self):
        tok = self.peek()
        self.pos += 1
        return tok

    def at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    def parse(self) -> CommandNode:
        node = self.parse_level(0)
        if not self.at_end():
            raise ParseError(f"syntax error near unexpected token '{self.peek()}'")
        return node

    def parse_level(self, level: int) -> CommandNode:
        if level == len(PRECEDENCE):
            return CommandNode.leaf(self.parse_simple())

        operators = PRECEDENCE[level]
        node = self.parse_level(level + 1)
        while self.peek() in operators:
            tok = self.next()
            if tok in TRAILING_OPERATORS and self.at_end():
                break
            right = self.parse_level(level + 1)
            node = CommandNode.binary(operators[tok], node, right)
        return node

    def require_filename(self, op: str) -> Word:
        tok = self.next()
        if tok is None or tok in CONTROL_OPERATORS or tok in REDIRECTIONS:
            raise ParseError(f"syntax error: expected filename after '{op}'")
        return Word.from_token(tok)

    def parse_simple(self) -> SimpleCommand:
        words = []
        redirs = {}

        while self.peek() is not None and self.peek() not in CONTROL_OPERATORS:
            tok = self.next()

            if tok == "<":
                redirs["stdin"] = self.require_filename(tok)
                continue
            if tok in (">", ">>"):
                redirs["stdout"] = self.require_filename(tok)
                redirs["stdout_append"] = tok == ">>"
                continue
            if tok in ("&>", "&>>"):
                target = self.require_filename(tok)
                redirs["stdout"] = redirs["stderr"] = target
                redirs["stdout_append"] = redirs["stderr_append"] = tok == "&>>"
                continue

            # fd redirection: 2 > file or 2 >> file
            if tok.isdigit() and self.peek() in (">", ">>"):
                op = self.next()
                target = self.require_filename(tok + op)
                if tok == "2":
                    redirs["stderr"] = target
                    redirs["stderr_append"] = op == ">>"
                elif tok == "1":
                    redirs["stdout"] = target
                    redirs["stdout_append"] = op == ">>"
                else:
                    raise ParseError(f"unsupported fd redirection: {tok}{op}")
                continue

            if not words and is_assignment_token(tok):
                words.append(assignment_word(tok))
            else:
                words.append(Word.from_token(tok))

        if not words:
            found = self.peek()
            if found is None:
                raise ParseError("syntax error: unexpected end of line")
            raise ParseError(f"syntax error near unexpected token '{found}'")
        if words[0].is_assignment() and len(words) > 1:
            raise ParseError(f"{words[0].text}: assignment takes no arguments")

        return SimpleCommand(words[0], words[1:], **redirs)


def parse_line(tokens: list[str]) -> CommandNode | None:
    """ Build the command tree for one line. An empty line gives None. """
    if not tokens:
        return None
    return _Parser(tokens).parse()
