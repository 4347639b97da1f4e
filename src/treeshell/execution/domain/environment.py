"""
Shell environment.

The name/value pairs a session hands to every program it starts. The object
is passed by reference to the components that read or change it; each spawn
receives a snapshot, so a child never changes its parent's copy.
"""

from __future__ import annotations

import os
from collections.abc import Iterator, Mapping
from typing import Optional

from treeshell.shared.domain.exceptions import AssignmentError


class ShellEnvironment:
    """
    Mutable environment of one shell session.

    Example:
        >>> env = ShellEnvironment({"PATH": "/bin"})
        >>> env.assign("GREETING", "hi")
        >>> env.snapshot()["GREETING"]
        'hi'
    """

    def __init__(self, variables: Optional[Mapping[str, str]] = None):
        self._variables: dict[str, str] = dict(variables or {})

    @classmethod
    def from_process(cls) -> ShellEnvironment:
        """Start from a copy of the interpreter's own environment."""
        return cls(os.environ)

    @staticmethod
    def parse_assignment(text: str) -> tuple[str, str]:
        """
        Split a NAME=value word.

        Raises:
            AssignmentError: Unless there is exactly one '=' with text on both sides
        """
        name, sep, value = text.partition("=")
        if not sep or "=" in value or not name or not value:
            raise AssignmentError(f"Invalid assignment: {text}", context={"text": text})
        return name, value

    def assign(self, name: str, value: str) -> None:
        if not name or "=" in name or "\0" in name or "\0" in value:
            raise AssignmentError(f"Cannot set variable {name!r}", context={"name": name})
        self._variables[name] = value

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self._variables.get(name, default)

    def snapshot(self) -> dict[str, str]:
        return dict(self._variables)

    def __contains__(self, name: object) -> bool:
        return name in self._variables

    def __iter__(self) -> Iterator[str]:
        return iter(self._variables)

    def __len__(self) -> int:
        return len(self._variables)
