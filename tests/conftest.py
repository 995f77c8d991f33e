"""
Pytest configuration and fixtures for sob tests.
"""

import pytest
import tempfile
from pathlib import Path

from sob.utils.process import ProcessResult


class FakeRunner:
    """Records commands instead of running them.

    Any command containing one of the ``fail_on`` substrings exits with
    status 1 and some diagnostic text.
    """

    def __init__(self, fail_on=()):
        self.fail_on = list(fail_on)
        self.commands = []
        self.cwds = []

    def run(self, command, cwd=None):
        self.commands.append(command)
        self.cwds.append(cwd)
        for needle in self.fail_on:
            if needle in command:
                return ProcessResult(command, 1, "", f"error: {needle}")
        return ProcessResult(command, 0, "", "")


@pytest.fixture
def temp_dir():
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmp:
        yield Path(tmp)


@pytest.fixture
def runner():
    """Provide a FakeRunner where every command succeeds."""
    return FakeRunner()


@pytest.fixture
def make_runner():
    """Provide a factory for FakeRunners failing on given substrings."""
    return FakeRunner


@pytest.fixture
def sample_manifest(temp_dir):
    """Create a manifest declaring two targets."""
    path = temp_dir / "sob.toml"
    path.write_text(
        '[toolchain.gcc]\n'
        'ldflags = ["-lm"]\n'
        '\n'
        '[[target]]\n'
        'name = "app"\n'
        'sources = ["a.cpp", "b.cpp"]\n'
        '\n'
        '[[target]]\n'
        'name = "tool"\n'
        'sources = ["tool.cpp"]\n'
    )
    return path
