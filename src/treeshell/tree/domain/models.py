"""
Command tree domain models.

A command tree is a closed union of one leaf type (SimpleCommand) and five
binary operator nodes. Nodes are immutable and own their children; the
orchestrator only reads them.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from typing import ClassVar, Optional, Union

from treeshell.tree.domain.enums import Operator


@dataclass(frozen=True)
class WordPart:
    """A fragment of a word; `expand` parts name an environment variable."""

    text: str
    expand: bool = False


@dataclass(frozen=True)
class Word:
    """
    A token of a simple command: verb, parameter or redirection target.

    Examples:
        >>> Word.literal("echo")
        Word(parts=(WordPart(text='echo', expand=False),))
        >>> Word.of(WordPart("HOME", expand=True), "/bin").to_text()
        '$HOME/bin'
    """

    parts: tuple[WordPart, ...]

    def __post_init__(self) -> None:
        if not self.parts:
            raise ValueError("A word needs at least one part")

    @classmethod
    def literal(cls, text: str) -> Word:
        return cls((WordPart(text),))

    @classmethod
    def variable(cls, name: str) -> Word:
        return cls((WordPart(name, expand=True),))

    @classmethod
    def of(cls, *parts: Union[str, WordPart]) -> Word:
        return cls(tuple(WordPart(p) if isinstance(p, str) else p for p in parts))

    def to_text(self) -> str:
        rendered = []
        for part in self.parts:
            if part.expand:
                rendered.append(f"${part.text}")
            elif part.text and all(c.isalnum() or c in "@%+=:,./-_" for c in part.text):
                rendered.append(part.text)
            else:
                rendered.append(shlex.quote(part.text))
        return "".join(rendered)


WordLike = Union[str, Word]


def as_word(value: WordLike) -> Word:
    """Accept plain strings wherever a literal word is meant."""
    return value if isinstance(value, Word) else Word.literal(value)


@dataclass(frozen=True)
class SimpleCommand:
    """
    Leaf node: one verb, its parameters and optional redirections.

    stdout_append/stderr_append select append mode for the corresponding
    target; when false the target is truncated.
    """

    verb: Word
    params: tuple[Word, ...] = ()
    stdin: Optional[Word] = None
    stdout: Optional[Word] = None
    stderr: Optional[Word] = None
    stdout_append: bool = False
    stderr_append: bool = False

    def to_text(self) -> str:
        pieces = [self.verb.to_text(), *(p.to_text() for p in self.params)]
        if self.stdin is not None:
            pieces.append(f"< {self.stdin.to_text()}")
        if (
            self.stdout is not None
            and self.stdout == self.stderr
            and self.stdout_append == self.stderr_append
        ):
            pieces.append(f"{'&>>' if self.stdout_append else '&>'} {self.stdout.to_text()}")
            return " ".join(pieces)
        if self.stdout is not None:
            pieces.append(f"{'>>' if self.stdout_append else '>'} {self.stdout.to_text()}")
        if self.stderr is not None:
            pieces.append(f"{'2>>' if self.stderr_append else '2>'} {self.stderr.to_text()}")
        return " ".join(pieces)


@dataclass(frozen=True)
class _BinaryNode:
    left: CommandNode
    right: CommandNode

    operator: ClassVar[Operator]

    def to_text(self) -> str:
        return f"{_child_text(self.left)} {self.operator.value} {_child_text(self.right)}"


@dataclass(frozen=True)
class Sequential(_BinaryNode):
    operator: ClassVar[Operator] = Operator.SEQUENTIAL


@dataclass(frozen=True)
class Parallel(_BinaryNode):
    operator: ClassVar[Operator] = Operator.PARALLEL


@dataclass(frozen=True)
class Pipe(_BinaryNode):
    operator: ClassVar[Operator] = Operator.PIPE


@dataclass(frozen=True)
class ConditionalIfZero(_BinaryNode):
    operator: ClassVar[Operator] = Operator.CONDITIONAL_ZERO


@dataclass(frozen=True)
class ConditionalIfNonZero(_BinaryNode):
    operator: ClassVar[Operator] = Operator.CONDITIONAL_NONZERO


CommandNode = Union[
    SimpleCommand,
    Sequential,
    Parallel,
    Pipe,
    ConditionalIfZero,
    ConditionalIfNonZero,
]

NODE_TYPES: dict[Operator, type[_BinaryNode]] = {
    Operator.SEQUENTIAL: Sequential,
    Operator.PARALLEL: Parallel,
    Operator.PIPE: Pipe,
    Operator.CONDITIONAL_ZERO: ConditionalIfZero,
    Operator.CONDITIONAL_NONZERO: ConditionalIfNonZero,
}


def _child_text(node: CommandNode) -> str:
    if isinstance(node, SimpleCommand):
        return node.to_text()
    return f"({node.to_text()})"


def simple(
    verb: WordLike,
    *params: WordLike,
    stdin: Optional[WordLike] = None,
    stdout: Optional[WordLike] = None,
    stderr: Optional[WordLike] = None,
    stdout_append: bool = False,
    stderr_append: bool = False,
) -> SimpleCommand:
    """
    Build a SimpleCommand from strings or words.

    Example:
        >>> simple("ls", "-l", stdout="listing.txt").to_text()
        'ls -l > listing.txt'
    """
    return SimpleCommand(
        verb=as_word(verb),
        params=tuple(as_word(p) for p in params),
        stdin=as_word(stdin) if stdin is not None else None,
        stdout=as_word(stdout) if stdout is not None else None,
        stderr=as_word(stderr) if stderr is not None else None,
        stdout_append=stdout_append,
        stderr_append=stderr_append,
    )


def combine(operator: Operator, left: CommandNode, right: CommandNode) -> CommandNode:
    """Build the composite node for `operator`."""
    return NODE_TYPES[operator](left, right)
