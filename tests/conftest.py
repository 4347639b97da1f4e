"""Shared test fixtures for the treeshell test suite."""

import os
import stat

import pytest

from treeshell.execution.application.redirection import RedirectionResolver
from treeshell.execution.application.resolver import EnvironmentTokenResolver
from treeshell.execution.application.session import ShellSession
from treeshell.execution.domain.environment import ShellEnvironment


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run the test inside a temporary directory; the original cwd is restored afterwards."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def environment():
    """A shell environment copied from the test process."""
    return ShellEnvironment.from_process()


@pytest.fixture
def resolver(environment):
    return EnvironmentTokenResolver(environment)


@pytest.fixture
def redirections(resolver):
    return RedirectionResolver(resolver, file_mode=0o644)


@pytest.fixture
def session(workdir, environment):
    """A shell session working in a temporary directory."""
    return ShellSession(environment=environment)


@pytest.fixture
def make_script(tmp_path):
    """Create an executable /bin/sh script in a dedicated bin directory."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()

    def _make(name: str, body: str):
        script = bin_dir / name
        script.write_text(f"#!/bin/sh\n{body}\n")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    _make.bin_dir = bin_dir
    return _make


@pytest.fixture
def open_fds():
    """Descriptors currently open in the test process."""

    def _list():
        return set(os.listdir("/proc/self/fd"))

    return _list
