"""
Blocking process execution for sob.

Every compiler and linker invocation goes through CommandRunner so the
resolver can be driven by a fake runner in tests.
"""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..errors import ProcessSpawnFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of one external command.

    Attributes:
        command: The command line that was run
        returncode: Exit status (0 means success)
        stdout: Captured standard output
        stderr: Captured standard error
    """
    command: str
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Combined diagnostic text, stdout first."""
        return "\n".join(part for part in (self.stdout.rstrip(), self.stderr.rstrip()) if part)


def executable_of(command: str) -> Optional[str]:
    """Return the first word of a command line, or None for an empty one."""
    try:
        words = shlex.split(command, posix=sys.platform != "win32")
    except ValueError:
        words = command.split()
    return words[0] if words else None


class CommandRunner:
    """Runs shell command lines and waits for them.

    Command lines go through the shell because descriptors may carry
    substitutions such as `llvm-config --ldflags`.

    Example:
        >>> runner = CommandRunner()
        >>> result = runner.run("g++ --version")
        >>> result.ok
        True
    """

    def __init__(self, timeout: Optional[float] = None, which=shutil.which):
        """Initialize the runner.

        Args:
            timeout: Optional per-command timeout in seconds
            which: Executable lookup function (shutil.which by default)
        """
        self.timeout = timeout
        self._which = which

    def run(self, command: str, cwd: Optional[Path] = None) -> ProcessResult:
        """Run one command line.

        Args:
            command: The command line
            cwd: Working directory for the process

        Returns:
            ProcessResult: Exit status and captured output

        Raises:
            ProcessSpawnFailure: If the executable is missing or cannot start
        """
        executable = executable_of(command)
        if executable is None:
            raise ProcessSpawnFailure(command, None, "empty command")
        if self._which(executable) is None:
            raise ProcessSpawnFailure(command, executable, "executable not found in PATH")

        logger.debug(f"Running: {command}")
        try:
            r = subprocess.run(
                command,
                shell=True,
                cwd=str(cwd) if cwd is not None else None,
                capture_output=True,
                text=True,
                check=False,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            logger.error(f"Command timed out after {self.timeout}s: {command}")
            return ProcessResult(command, -1, "", f"timed out after {self.timeout}s")
        except OSError as e:
            raise ProcessSpawnFailure(command, executable, str(e)) from e

        return ProcessResult(command, r.returncode, r.stdout or "", r.stderr or "")
