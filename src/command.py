""" Command tree handed to the evaluator. """
import enum

from word import Word


class Operator(enum.Enum):
    NONE = "none"
    SEQUENTIAL = ";"
    PARALLEL = "&"
    CONDITIONAL_NZERO = "||"
    CONDITIONAL_ZERO = "&&"
    PIPE = "|"


class SimpleCommand:
    """ A leaf of the command tree. """
    def __init__(self, verb: Word, params=(), stdin: Word = None,
                 stdout: Word = None, stdout_append=False,
                 stderr: Word = None, stderr_append=False):
        self.verb = verb
        self.params = tuple(params)
        self.stdin = stdin          # Word or None

        self.stdout = stdout        # Word or None
        self.stdout_append = stdout_append  # True for >>

        self.stderr = stderr        # Word or None
        self.stderr_append = stderr_append

    @property
    def name(self) -> str:
        return self.verb.text

    def is_assignment(self) -> bool:
        return self.verb.is_assignment()

    def has_redirections(self) -> bool:
        return any(w is not None for w in (self.stdin, self.stdout, self.stderr))

    def argv(self, state) -> list[str]:
        return [self.verb.resolve(state)] + [w.resolve(state) for w in self.params]

    def __repr__(self):
        return f"SimpleCommand({self.verb!r}, {list(self.params)!r})"


class CommandNode:
    """
    Either a leaf wrapping a SimpleCommand (op is Operator.NONE) or an
    operator with exactly two children. Nodes are not changed after
    construction.
    """
    __slots__ = ("op", "scmd", "left", "right")

    def __init__(self, op: Operator, scmd: SimpleCommand = None,
                 left: "CommandNode" = None, right: "CommandNode" = None):
        if op is Operator.NONE:
            if scmd is None or left is not None or right is not None:
                raise ValueError("a leaf node holds exactly one simple command")
        elif left is None or right is None or scmd is not None:
            raise ValueError(f"operator {op.value!r} needs two children")
        object.__setattr__(self, "op", op)
        object.__setattr__(self, "scmd", scmd)
        object.__setattr__(self, "left", left)
        object.__setattr__(self, "right", right)

    def __setattr__(self, name, value):
        raise AttributeError("command nodes are immutable")

    @classmethod
    def leaf(cls, scmd: SimpleCommand) -> "CommandNode":
        return cls(Operator.NONE, scmd=scmd)

    @classmethod
    def binary(cls, op: Operator, left: "CommandNode", right: "CommandNode") -> "CommandNode":
        return cls(op, left=left, right=right)

    @property
    def is_leaf(self) -> bool:
        return self.op is Operator.NONE

    def __repr__(self):
        if self.is_leaf:
            return f"CommandNode({self.scmd!r})"
        return f"CommandNode({self.left!r} {self.op.value} {self.right!r})"
