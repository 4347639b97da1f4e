"""
Tests for the Redirection Resolver.

Opens real files in a temporary directory and checks modes, aliasing and
error handling.
"""

import os

import pytest

from treeshell.shared.domain.exceptions import RedirectionError
from treeshell.tree.domain.models import Word, simple


class TestOpen:
    """Test opening redirection targets."""

    def test_no_redirections(self, redirections):
        with redirections.open(simple("true")) as streams:
            assert streams.stdin is None
            assert streams.stdout is None
            assert streams.stderr is None

    def test_stdin_is_read_only(self, redirections, tmp_path):
        source = tmp_path / "in.txt"
        source.write_text("data")

        with redirections.open(simple("cat", stdin=str(source))) as streams:
            assert os.read(streams.stdin, 10) == b"data"
            with pytest.raises(OSError):
                os.write(streams.stdin, b"x")

    def test_missing_stdin_is_an_error(self, redirections, tmp_path):
        with pytest.raises(RedirectionError, match="Cannot open"):
            with redirections.open(simple("cat", stdin=str(tmp_path / "missing.txt"))):
                pass

    def test_stdout_truncates(self, redirections, tmp_path):
        target = tmp_path / "out.txt"
        target.write_text("previous content")

        with redirections.open(simple("echo", stdout=str(target))) as streams:
            os.write(streams.stdout, b"new")

        assert target.read_text() == "new"

    def test_stdout_appends(self, redirections, tmp_path):
        target = tmp_path / "out.txt"
        target.write_text("previous ")

        with redirections.open(simple("echo", stdout=str(target), stdout_append=True)) as streams:
            os.write(streams.stdout, b"new")

        assert target.read_text() == "previous new"

    def test_stdout_is_created_with_file_mode(self, redirections, tmp_path):
        target = tmp_path / "created.txt"
        old_umask = os.umask(0)
        try:
            with redirections.open(simple("echo", stdout=str(target))):
                pass
        finally:
            os.umask(old_umask)

        assert target.stat().st_mode & 0o777 == 0o644

    def test_stderr_aliases_stdout_for_same_path(self, redirections, tmp_path):
        target = str(tmp_path / "both.txt")

        with redirections.open(simple("make", stdout=target, stderr=target)) as streams:
            assert streams.stderr_aliased
            os.write(streams.stdout, b"out\n")
            os.write(streams.stderr, b"err\n")

        assert (tmp_path / "both.txt").read_text() == "out\nerr\n"

    def test_alias_compares_resolved_paths(self, redirections, environment, tmp_path):
        environment.assign("LOG", str(tmp_path / "log.txt"))

        command = simple("make", stdout=Word.variable("LOG"), stderr=str(tmp_path / "log.txt"))

        with redirections.open(command) as streams:
            assert streams.stderr_aliased

    def test_stderr_opened_separately(self, redirections, tmp_path):
        out_path = tmp_path / "out.txt"
        err_path = tmp_path / "err.txt"
        err_path.write_text("old ")

        command = simple("make", stdout=str(out_path), stderr=str(err_path), stderr_append=True)

        with redirections.open(command) as streams:
            assert not streams.stderr_aliased
            os.write(streams.stderr, b"err")

        assert out_path.read_text() == ""
        assert err_path.read_text() == "old err"

    def test_descriptors_closed_on_exit(self, redirections, tmp_path):
        with redirections.open(simple("echo", stdout=str(tmp_path / "out.txt"))) as streams:
            fd = streams.stdout

        with pytest.raises(OSError):
            os.fstat(fd)

    def test_failure_closes_already_opened_targets(self, redirections, tmp_path, open_fds):
        before = open_fds()
        command = simple("echo", stdout=str(tmp_path / "out.txt"), stderr=str(tmp_path / "no" / "err.txt"))

        with pytest.raises(RedirectionError):
            with redirections.open(command):
                pass

        assert open_fds() == before


class TestTouchTargets:
    """Test the create/truncate pass used by cd."""

    def test_creates_every_target(self, redirections, tmp_path):
        command = simple(
            "cd",
            stdin=str(tmp_path / "in.txt"),
            stdout=str(tmp_path / "out.txt"),
            stderr=str(tmp_path / "err.txt"),
        )

        redirections.touch_targets(command)

        assert (tmp_path / "in.txt").exists()
        assert (tmp_path / "out.txt").exists()
        assert (tmp_path / "err.txt").exists()

    def test_truncates_existing_targets(self, redirections, tmp_path):
        target = tmp_path / "out.txt"
        target.write_text("keep me?")

        redirections.touch_targets(simple("cd", stdout=str(target), stdout_append=True))

        assert target.read_text() == ""

    def test_unreachable_target(self, redirections, tmp_path):
        with pytest.raises(RedirectionError):
            redirections.touch_targets(simple("cd", stdout=str(tmp_path / "no" / "out.txt")))
