"""
Command tree enums.

Defines the operators that combine two command trees.
"""

from enum import Enum


class Operator(Enum):
    """
    Binary operator of a composite command tree node.

    Values are the shell spellings, also used as the `op` key of tree
    documents.
    """

    SEQUENTIAL = ";"  # Run left, then right
    PARALLEL = "&"  # Run both sides concurrently
    PIPE = "|"  # Left stdout feeds right stdin
    CONDITIONAL_ZERO = "&&"  # Run right only if left succeeded
    CONDITIONAL_NONZERO = "||"  # Run right only if left failed
