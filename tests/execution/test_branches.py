"""Tests for forked branches and channels."""

import os
import signal

import pytest

from treeshell.execution.infrastructure.branches import Branch, Channel, spawn_branch
from treeshell.shared.domain.exceptions import SpawnError, WaitError


class TestSpawnBranch:
    """Test running work in a forked child."""

    def test_exit_code_is_returned(self):
        branch = spawn_branch(lambda: 3)

        assert branch.join() == 3

    def test_status_is_masked_to_eight_bits(self):
        assert spawn_branch(lambda: -100).join() == 156

    def test_crash_exits_with_failure(self):
        def crash():
            raise RuntimeError("boom")

        assert spawn_branch(crash).join() == 1

    def test_killed_branch_reports_signal(self):
        branch = spawn_branch(lambda: os.kill(os.getpid(), signal.SIGKILL) or 0)

        assert branch.join() == -signal.SIGKILL

    def test_child_state_does_not_leak(self):
        state = {"value": "parent"}

        def mutate():
            state["value"] = "child"
            return 0

        spawn_branch(mutate).join()

        assert state["value"] == "parent"

    def test_fork_failure(self, monkeypatch):
        def failing_fork():
            raise BlockingIOError(11, "Resource temporarily unavailable")

        monkeypatch.setattr(os, "fork", failing_fork)

        with pytest.raises(SpawnError, match="Cannot create"):
            spawn_branch(lambda: 0, label="test branch")

    def test_join_twice_fails(self):
        branch = spawn_branch(lambda: 0)
        branch.join()

        with pytest.raises(WaitError):
            branch.join()

    def test_join_unknown_pid(self):
        with pytest.raises(WaitError):
            Branch(pid=2**22 + 12345).join()


class TestChannel:
    """Test the anonymous pipe between branches."""

    def test_stdout_wired_to_channel(self):
        with Channel() as channel:
            writer = spawn_branch(
                lambda: os.write(1, b"hello") and 0,
                stdout=channel.write_fd,
                close=(channel.read_fd,),
            )
            assert writer.join() == 0
            assert os.read(channel.read_fd, 5) == b"hello"

    def test_stdin_wired_to_channel(self):
        with Channel() as channel:
            os.write(channel.write_fd, b"ping")
            reader = spawn_branch(
                lambda: 0 if os.read(0, 4) == b"ping" else 1,
                stdin=channel.read_fd,
                close=(channel.write_fd,),
            )
            assert reader.join() == 0

    def test_descriptors_are_not_inheritable(self):
        with Channel() as channel:
            assert not os.get_inheritable(channel.read_fd)
            assert not os.get_inheritable(channel.write_fd)

    def test_close_is_idempotent(self):
        channel = Channel()
        read_fd = channel.read_fd

        channel.close()
        channel.close()

        with pytest.raises(OSError):
            os.fstat(read_fd)
