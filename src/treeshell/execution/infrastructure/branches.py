"""
Branches and channels.

A branch is a forked copy of the shell that evaluates one side of a Parallel
or Pipe node and exits with that side's status. A channel is the anonymous
pipe connecting the two sides of a Pipe.

Pipe descriptors are created non-inheritable, so programs started with
subprocess never hold on to them; only the standard stream slots a branch
wires them onto are passed on.
"""

from __future__ import annotations

import contextlib
import os
import sys
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from types import TracebackType
from typing import Optional

from treeshell.execution.domain.status import FAILURE
from treeshell.shared.domain.exceptions import ChannelError, SpawnError, WaitError
from treeshell.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


@dataclass
class Branch:
    """Handle on a forked child; join() must be called exactly once."""

    pid: int
    label: str = "branch"

    def join(self) -> int:
        """
        Wait for the branch to terminate.

        Returns:
            The exit code, or the negated signal number if it was killed

        Raises:
            WaitError: If the child cannot be waited for
        """
        try:
            _, wait_status = os.waitpid(self.pid, 0)
        except ChildProcessError as e:
            raise WaitError(
                f"Cannot wait for {self.label} (pid {self.pid})",
                context={"pid": self.pid},
            ) from e

        code = os.waitstatus_to_exitcode(wait_status)
        logger.debug("branch_joined", label=self.label, pid=self.pid, code=code)
        return code


class Channel:
    """
    One-directional byte channel between two branches.

    Example:
        >>> with Channel() as channel:
        ...     writer = spawn_branch(produce, stdout=channel.write_fd, close=[channel.read_fd])
        ...     reader = spawn_branch(consume, stdin=channel.read_fd, close=[channel.write_fd])
        >>> writer.join(), reader.join()
    """

    def __init__(self) -> None:
        try:
            self.read_fd, self.write_fd = os.pipe()
        except OSError as e:
            raise ChannelError(f"Cannot create pipe: {e.strerror}") from e
        self._closed = False

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        os.close(self.read_fd)
        os.close(self.write_fd)

    def __enter__(self) -> Channel:
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_value: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()


def _flush_standard_streams() -> None:
    for stream in (sys.stdout, sys.stderr):
        with contextlib.suppress(OSError, ValueError):
            stream.flush()


def _wire(fd: Optional[int], slot: int) -> None:
    if fd is None or fd == slot:
        return
    os.dup2(fd, slot)
    os.close(fd)


def _run_child(
    work: Callable[[], int],
    stdin: Optional[int],
    stdout: Optional[int],
    close: Iterable[int],
) -> None:
    """Body of a forked branch. Never returns."""
    status = FAILURE
    try:
        for fd in close:
            os.close(fd)
        _wire(stdin, 0)
        _wire(stdout, 1)
        status = work()
    except Exception:
        logger.exception("branch_crashed", pid=os.getpid())
    finally:
        _flush_standard_streams()
        os._exit(status & 0xFF)


def spawn_branch(
    work: Callable[[], int],
    *,
    stdin: Optional[int] = None,
    stdout: Optional[int] = None,
    close: Iterable[int] = (),
    label: str = "branch",
) -> Branch:
    """
    Run `work` in a forked child.

    Args:
        work: Evaluates the branch and returns its exit status
        stdin: Descriptor to wire onto the child's standard input
        stdout: Descriptor to wire onto the child's standard output
        close: Descriptors the child must not keep open
        label: Name used in logs and error messages

    Raises:
        SpawnError: If the process cannot be created
    """
    _flush_standard_streams()
    try:
        pid = os.fork()
    except OSError as e:
        raise SpawnError(f"Cannot create {label}: {e.strerror}", context={"label": label}) from e

    if pid == 0:
        _run_child(work, stdin, stdout, close)

    logger.debug("branch_spawned", label=label, pid=pid)
    return Branch(pid=pid, label=label)
