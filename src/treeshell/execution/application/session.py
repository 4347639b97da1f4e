"""
Shell session.

Wires the resolver, redirections, built-ins, executor and orchestrator
around one ShellEnvironment and exposes the entry points a driver calls once
per input line.
"""

from collections.abc import Iterable
from typing import Optional

from treeshell.execution.application.builtins import BuiltinDispatcher
from treeshell.execution.application.orchestrator import ProcessOrchestrator
from treeshell.execution.application.redirection import RedirectionResolver
from treeshell.execution.application.resolver import EnvironmentTokenResolver, TokenResolver
from treeshell.execution.application.simple_executor import SimpleCommandExecutor
from treeshell.execution.domain.environment import ShellEnvironment
from treeshell.execution.domain.status import SHELL_EXIT, SUCCESS
from treeshell.shared.infrastructure.logging import ensure_logging, get_logger
from treeshell.tree.domain.models import CommandNode

logger = get_logger(__name__)


class ShellSession:
    """
    One running shell.

    The environment lives as long as the session: assignments made by one
    tree are seen by the trees executed after it.

    Example:
        >>> session = ShellSession()
        >>> session.execute(simple("true"))
        0
    """

    def __init__(
        self,
        environment: Optional[ShellEnvironment] = None,
        resolver: Optional[TokenResolver] = None,
        file_mode: Optional[int] = None,
    ):
        ensure_logging()
        self.environment = environment if environment is not None else ShellEnvironment.from_process()
        self.resolver = resolver if resolver is not None else EnvironmentTokenResolver(self.environment)
        self.redirections = RedirectionResolver(self.resolver, file_mode=file_mode)
        self.builtins = BuiltinDispatcher(self.environment, self.resolver, self.redirections)
        self.executor = SimpleCommandExecutor(
            self.environment, self.resolver, self.redirections, self.builtins
        )
        self.orchestrator = ProcessOrchestrator(self.executor)

    def execute(self, tree: CommandNode) -> int:
        """Evaluate one command tree and return its exit status."""
        status = self.orchestrator.evaluate(tree)
        logger.debug("tree_executed", command=tree.to_text(), status=status)
        return status

    def run(self, trees: Iterable[CommandNode]) -> int:
        """
        Execute trees in order until one of them terminates the shell.

        Returns:
            Status of the last tree executed (SHELL_EXIT if the shell was
            told to stop), SUCCESS when there was nothing to run
        """
        status = SUCCESS
        for tree in trees:
            status = self.execute(tree)
            if status == SHELL_EXIT:
                logger.debug("shell_exit_requested")
                break
        return status


def execute(tree: CommandNode, environment: Optional[ShellEnvironment] = None) -> int:
    """Evaluate `tree` in a fresh session."""
    return ShellSession(environment=environment).execute(tree)
