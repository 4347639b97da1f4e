"""
Redirection Resolver.

Opens the files a simple command redirects its standard streams to. The
descriptors are handed to the spawned program and closed again in the
shell once the program has been started.
"""

import os
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional

from treeshell.execution.application.resolver import TokenResolver
from treeshell.shared.domain.exceptions import RedirectionError
from treeshell.shared.infrastructure.config import settings
from treeshell.shared.infrastructure.logging import get_logger
from treeshell.tree.domain.models import SimpleCommand

logger = get_logger(__name__)

_TRUNCATE_FLAGS = os.O_WRONLY | os.O_CREAT | os.O_TRUNC
_APPEND_FLAGS = os.O_WRONLY | os.O_CREAT | os.O_APPEND


@dataclass
class OpenedStreams:
    """Descriptors for the standard streams of one command; None means inherit."""

    stdin: Optional[int] = None
    stdout: Optional[int] = None
    stderr: Optional[int] = None

    @property
    def stderr_aliased(self) -> bool:
        return self.stderr is not None and self.stderr == self.stdout

    def close(self) -> None:
        # An aliased descriptor appears twice but is closed once
        for fd in {fd for fd in (self.stdin, self.stdout, self.stderr) if fd is not None}:
            os.close(fd)
        self.stdin = self.stdout = self.stderr = None


class RedirectionResolver:
    """
    Open redirection targets for simple commands.

    stdin is opened read-only. stdout and stderr are created when missing and
    truncated or appended to according to their own flag. When stderr names
    the same path as stdout it shares stdout's descriptor, so the file is
    neither truncated twice nor written through two independent offsets.
    """

    def __init__(self, resolver: TokenResolver, file_mode: Optional[int] = None):
        self.resolver = resolver
        self.file_mode = file_mode if file_mode is not None else settings.redirect_file_mode

    @contextmanager
    def open(self, command: SimpleCommand) -> Iterator[OpenedStreams]:
        """
        Open every declared target of `command`.

        Yields:
            The opened descriptors, closed again when the block exits

        Raises:
            RedirectionError: If any target cannot be opened
        """
        streams = OpenedStreams()
        try:
            if command.stdin is not None:
                streams.stdin = self._open(self.resolver.resolve_word(command.stdin), os.O_RDONLY)

            stdout_path = None
            if command.stdout is not None:
                stdout_path = self.resolver.resolve_word(command.stdout)
                streams.stdout = self._open_for_write(stdout_path, command.stdout_append)

            if command.stderr is not None:
                stderr_path = self.resolver.resolve_word(command.stderr)
                if streams.stdout is not None and stderr_path == stdout_path:
                    streams.stderr = streams.stdout
                    logger.debug("stderr_aliased_to_stdout", path=stderr_path)
                else:
                    streams.stderr = self._open_for_write(stderr_path, command.stderr_append)

            yield streams
        finally:
            streams.close()

    def touch_targets(self, command: SimpleCommand) -> None:
        """
        Create or truncate every declared target without using it.

        This is what the cd built-in does with its redirections, stdin
        included.
        """
        for target in (command.stdin, command.stdout, command.stderr):
            if target is None:
                continue
            os.close(self._open(self.resolver.resolve_word(target), _TRUNCATE_FLAGS))

    def _open_for_write(self, path: str, append: bool) -> int:
        return self._open(path, _APPEND_FLAGS if append else _TRUNCATE_FLAGS)

    def _open(self, path: str, flags: int) -> int:
        try:
            return os.open(path, flags, self.file_mode)
        except OSError as e:
            logger.debug("redirection_failed", path=path, error=e.strerror)
            raise RedirectionError(
                f"Cannot open '{path}': {e.strerror}",
                context={"path": path, "errno": e.errno},
            ) from e
