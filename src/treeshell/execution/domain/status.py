"""
Exit status values.

0 is success and anything else a failure. SHELL_EXIT is the reserved status
returned by exit/quit; the driver stops reading input when it sees it.
"""

SUCCESS = 0
FAILURE = 1

# A program that could not be executed at all
EXEC_FAILURE = 255

SHELL_EXIT = -100
