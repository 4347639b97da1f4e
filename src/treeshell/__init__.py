"""treeshell - executes parsed shell command trees."""

from treeshell.execution import SHELL_EXIT, ShellEnvironment, ShellSession, execute
from treeshell.tree import (
    CommandNode,
    ConditionalIfNonZero,
    ConditionalIfZero,
    Parallel,
    Pipe,
    Sequential,
    SimpleCommand,
    Word,
    load_trees,
    simple,
)

__version__ = "0.1.0"

__all__ = [
    "SHELL_EXIT",
    "ShellEnvironment",
    "ShellSession",
    "execute",
    "CommandNode",
    "SimpleCommand",
    "Sequential",
    "Parallel",
    "Pipe",
    "ConditionalIfZero",
    "ConditionalIfNonZero",
    "Word",
    "load_trees",
    "simple",
]
