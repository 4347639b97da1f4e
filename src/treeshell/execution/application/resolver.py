"""
Token resolution.

Turns words into strings and simple commands into argument vectors.
"""

from typing import Protocol

from treeshell.execution.domain.environment import ShellEnvironment
from treeshell.tree.domain.models import SimpleCommand, Word


class TokenResolver(Protocol):
    """Service that resolves the words of a command tree."""

    def resolve_word(self, word: Word) -> str: ...

    def resolve_argv(self, command: SimpleCommand) -> list[str]: ...


class EnvironmentTokenResolver:
    """
    Resolve words against a ShellEnvironment.

    Literal parts are used as they are; expanded parts are replaced by the
    variable's current value, or nothing when it is unset.
    """

    def __init__(self, environment: ShellEnvironment):
        self.environment = environment

    def resolve_word(self, word: Word) -> str:
        return "".join(
            (self.environment.get(part.text) or "") if part.expand else part.text
            for part in word.parts
        )

    def resolve_argv(self, command: SimpleCommand) -> list[str]:
        """argv[0] is the verb, followed by one entry per parameter."""
        return [self.resolve_word(command.verb), *(self.resolve_word(p) for p in command.params)]
