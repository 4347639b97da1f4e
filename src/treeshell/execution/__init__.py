"""Execution module - runs command trees."""

from treeshell.execution.domain.environment import ShellEnvironment
from treeshell.execution.domain.status import EXEC_FAILURE, FAILURE, SHELL_EXIT, SUCCESS
from treeshell.execution.application.resolver import EnvironmentTokenResolver, TokenResolver
from treeshell.execution.application.redirection import OpenedStreams, RedirectionResolver
from treeshell.execution.application.builtins import BuiltinDispatcher
from treeshell.execution.application.simple_executor import SimpleCommandExecutor
from treeshell.execution.application.orchestrator import ProcessOrchestrator
from treeshell.execution.application.session import ShellSession, execute

__all__ = [
    "ShellEnvironment",
    "SUCCESS",
    "FAILURE",
    "EXEC_FAILURE",
    "SHELL_EXIT",
    "TokenResolver",
    "EnvironmentTokenResolver",
    "OpenedStreams",
    "RedirectionResolver",
    "BuiltinDispatcher",
    "SimpleCommandExecutor",
    "ProcessOrchestrator",
    "ShellSession",
    "execute",
]
