""" Command-line words made of literal and variable fragments. """
from constants import VAR_REF_RX


class WordPart:
    """ One fragment of a word: literal text, or a variable name to expand. """
    def __init__(self, text: str, expand: bool = False):
        self.text = text
        self.expand = expand

    def resolve(self, state) -> str:
        if self.expand:
            return state.get_var(self.text)
        return self.text

    def __eq__(self, other):
        if not isinstance(other, WordPart):
            return NotImplemented
        return (self.text, self.expand) == (other.text, other.expand)

    def __repr__(self):
        if self.expand:
            return f"WordPart(${self.text})"
        return f"WordPart({self.text!r})"


class Word:
    """
    An ordered chain of fragments. The resolved value is the concatenation
    of every fragment's value, in order; unset variables resolve to "".
    """
    def __init__(self, parts):
        self.parts = tuple(parts)

    @classmethod
    def literal(cls, text: str) -> "Word":
        return cls([WordPart(text)])

    @classmethod
    def from_token(cls, token: str) -> "Word":
        """ Split a raw token on $NAME / ${NAME} references. """
        parts = []
        pos = 0
        for m in VAR_REF_RX.finditer(token):
            if m.start() > pos:
                parts.append(WordPart(token[pos:m.start()]))
            parts.append(WordPart(m.group("braced") or m.group("name"), expand=True))
            pos = m.end()
        if pos < len(token) or not parts:
            parts.append(WordPart(token[pos:]))
        return cls(parts)

    @property
    def text(self) -> str:
        """ Text of the first fragment. Used for builtin lookups. """
        return self.parts[0].text if self.parts else ""

    def is_assignment(self) -> bool:
        return (
            len(self.parts) >= 2
            and not self.parts[1].expand
            and self.parts[1].text == "="
        )

    def assignment_value(self) -> "Word":
        return Word(self.parts[2:])

    def resolve(self, state) -> str:
        return "".join(part.resolve(state) for part in self.parts)

    def __eq__(self, other):
        if not isinstance(other, Word):
            return NotImplemented
        return self.parts == other.parts

    def __repr__(self):
        return f"Word({list(self.parts)!r})"
