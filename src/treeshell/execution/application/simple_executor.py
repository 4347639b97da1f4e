"""
Simple-Command Executor.

Runs one leaf of the command tree: a built-in, an assignment, or an external
program started with its redirections applied.
"""

import errno
import os
import shutil
import subprocess

from treeshell.execution.application.builtins import BuiltinDispatcher
from treeshell.execution.application.redirection import OpenedStreams, RedirectionResolver
from treeshell.execution.application.resolver import TokenResolver
from treeshell.execution.domain.environment import ShellEnvironment
from treeshell.execution.domain.status import EXEC_FAILURE, FAILURE
from treeshell.shared.domain.exceptions import (
    ProgramNotFoundError,
    ShellError,
    SpawnError,
    WaitError,
)
from treeshell.shared.infrastructure.logging import get_logger
from treeshell.shared.infrastructure.reporting import report
from treeshell.tree.domain.models import SimpleCommand

logger = get_logger(__name__)

_SHELL = "/bin/sh"


class SimpleCommandExecutor:
    """
    Execute simple commands.

    Built-ins and assignments run in the current process. Anything else is
    started as a child program that inherits a snapshot of the shell
    environment and is waited for before run() returns.
    """

    def __init__(
        self,
        environment: ShellEnvironment,
        resolver: TokenResolver,
        redirections: RedirectionResolver,
        builtins: BuiltinDispatcher,
    ):
        self.environment = environment
        self.resolver = resolver
        self.redirections = redirections
        self.builtins = builtins

    def run(self, command: SimpleCommand) -> int:
        """
        Run `command` and return its exit status.

        Errors never escape: they are reported on stderr and turned into a
        nonzero status.
        """
        verb = self.resolver.resolve_word(command.verb)
        if not verb:
            report("Empty command")
            return FAILURE

        if self.builtins.is_builtin(verb):
            return self.builtins.dispatch(verb, command)

        if "=" in verb:
            return self.builtins.assign(verb)

        try:
            process = self._spawn(verb, command)
            return self._wait(verb, process)
        except ProgramNotFoundError as e:
            report(e.message)
            return EXEC_FAILURE
        except ShellError as e:
            report(e.message)
            return FAILURE

    def _spawn(self, verb: str, command: SimpleCommand) -> subprocess.Popen:
        with self.redirections.open(command) as streams:
            argv = self.resolver.resolve_argv(command)
            try:
                process = self._start(argv, streams)
            except (FileNotFoundError, PermissionError, NotADirectoryError) as e:
                logger.debug("program_not_executable", verb=verb, error=e.strerror)
                raise ProgramNotFoundError(
                    f"Execution failed for '{verb}'", context={"verb": verb, "errno": e.errno}
                ) from e
            except OSError as e:
                raise SpawnError(
                    f"Cannot start '{verb}': {e.strerror}", context={"verb": verb}
                ) from e

        logger.debug("command_spawned", argv=argv, pid=process.pid)
        return process

    def _start(self, argv: list[str], streams: OpenedStreams) -> subprocess.Popen:
        """Start argv; an executable without an interpreter line runs under /bin/sh."""
        env = self.environment.snapshot()
        try:
            return _popen(argv, streams, env)
        except OSError as e:
            if e.errno != errno.ENOEXEC:
                raise
        program = shutil.which(argv[0], path=env.get("PATH", os.defpath)) or argv[0]
        logger.debug("running_as_shell_script", program=program)
        return _popen([_SHELL, program, *argv[1:]], streams, env)

    def _wait(self, verb: str, process: subprocess.Popen) -> int:
        try:
            code = process.wait()
        except ChildProcessError as e:
            raise WaitError(f"Cannot wait for '{verb}'", context={"pid": process.pid}) from e

        if code < 0:
            report(f"'{verb}' did not terminate normally (signal {-code})")
            return FAILURE

        logger.debug("command_finished", verb=verb, pid=process.pid, code=code)
        return code


def _popen(argv: list[str], streams: OpenedStreams, env: dict[str, str]) -> subprocess.Popen:
    return subprocess.Popen(
        argv,
        stdin=streams.stdin,
        stdout=streams.stdout,
        stderr=streams.stderr,
        env=env,
    )

