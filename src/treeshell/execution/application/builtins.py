"""
Built-in Dispatcher.

Commands that have to run inside the shell process itself: changing
directory, terminating the shell and assigning environment variables.
"""

import os
from collections.abc import Callable

from treeshell.execution.application.redirection import RedirectionResolver
from treeshell.execution.application.resolver import TokenResolver
from treeshell.execution.domain.environment import ShellEnvironment
from treeshell.execution.domain.status import FAILURE, SHELL_EXIT, SUCCESS
from treeshell.shared.domain.exceptions import (
    AssignmentError,
    DirectoryChangeError,
    RedirectionError,
)
from treeshell.shared.infrastructure.logging import get_logger
from treeshell.shared.infrastructure.reporting import report
from treeshell.tree.domain.models import SimpleCommand

logger = get_logger(__name__)

Builtin = Callable[[SimpleCommand], int]


class BuiltinDispatcher:
    """Run built-in commands in the current process."""

    def __init__(
        self,
        environment: ShellEnvironment,
        resolver: TokenResolver,
        redirections: RedirectionResolver,
    ):
        self.environment = environment
        self.resolver = resolver
        self.redirections = redirections
        self._builtins: dict[str, Builtin] = {
            "cd": self._change_directory,
            "exit": self._terminate,
            "quit": self._terminate,
        }

    def is_builtin(self, verb: str) -> bool:
        return verb in self._builtins

    def dispatch(self, verb: str, command: SimpleCommand) -> int:
        logger.debug("builtin_dispatched", verb=verb)
        return self._builtins[verb](command)

    def assign(self, text: str) -> int:
        """Apply a NAME=value verb to the shell environment."""
        try:
            name, value = ShellEnvironment.parse_assignment(text)
            self.environment.assign(name, value)
        except AssignmentError as e:
            report(e.message)
            return FAILURE
        logger.debug("variable_assigned", name=name)
        return SUCCESS

    def _change_directory(self, command: SimpleCommand) -> int:
        # Declared targets are created/truncated even though cd writes nothing
        try:
            self.redirections.touch_targets(command)
        except RedirectionError as e:
            report(e.message)
            return FAILURE

        if not command.params:
            return SUCCESS

        try:
            change_directory(self.resolver.resolve_word(command.params[0]))
        except DirectoryChangeError as e:
            report(e.message)
            return FAILURE
        return SUCCESS

    def _terminate(self, command: SimpleCommand) -> int:
        return SHELL_EXIT


def change_directory(path: str) -> None:
    """
    Change the working directory of the shell process.

    A relative path that cannot be entered directly is retried joined to the
    current directory.

    Raises:
        DirectoryChangeError: If neither attempt succeeds
    """
    try:
        os.chdir(path)
        return
    except OSError as e:
        last_error = e

    if not os.path.isabs(path):
        try:
            cwd = os.getcwd()
        except OSError as e:
            raise DirectoryChangeError(
                f"Error getting current directory: {e.strerror}", context={"path": path}
            ) from e
        try:
            os.chdir(os.path.join(cwd, path))
            return
        except OSError as e:
            last_error = e

    raise DirectoryChangeError(
        f"Error changing directory to '{path}': {last_error.strerror}",
        context={"path": path},
    ) from last_error
