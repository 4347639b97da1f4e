"""Tree module - command tree model and documents."""

from treeshell.tree.domain.enums import Operator
from treeshell.tree.domain.models import (
    CommandNode,
    ConditionalIfNonZero,
    ConditionalIfZero,
    Parallel,
    Pipe,
    Sequential,
    SimpleCommand,
    Word,
    WordPart,
    combine,
    simple,
)
from treeshell.tree.application.loader import load_trees, parse_trees

__all__ = [
    "Operator",
    "CommandNode",
    "SimpleCommand",
    "Sequential",
    "Parallel",
    "Pipe",
    "ConditionalIfZero",
    "ConditionalIfNonZero",
    "Word",
    "WordPart",
    "combine",
    "simple",
    "load_trees",
    "parse_trees",
]
