"""
Exception hierarchy for sob.

Declaration problems are raised before any process is spawned. Target
failures carry the captured compiler output so the driver can show it.
"""

from typing import Optional


class BuildError(Exception):
    """Base class for all sob errors."""


class InvalidDeclaration(BuildError, ValueError):
    """A target has no sources or reuses another target's name."""


class ManifestError(BuildError):
    """The build manifest could not be read or has the wrong shape."""


class ToolchainNotFound(BuildError):
    """No supported toolchain is available on the host."""


class TargetFailure(BuildError):
    """A compile or link step of one target exited non-zero.

    Attributes:
        target: Name of the failing target
        returncode: Exit status of the failing process
        output: Captured stdout and stderr of the failing process
    """

    def __init__(self, message: str, target: str, returncode: int, output: str = ""):
        super().__init__(message)
        self.target = target
        self.returncode = returncode
        self.output = output


class CompileFailure(TargetFailure):
    """The compiler exited non-zero for one source."""

    def __init__(self, target: str, source: str, returncode: int, output: str = ""):
        super().__init__(
            f"{target}: compiling {source} failed with exit code {returncode}",
            target, returncode, output,
        )
        self.source = source


class LinkFailure(TargetFailure):
    """The linker exited non-zero."""

    def __init__(self, target: str, returncode: int, output: str = ""):
        super().__init__(
            f"{target}: linking failed with exit code {returncode}",
            target, returncode, output,
        )


class ProcessSpawnFailure(BuildError):
    """The compiler or linker executable could not be started."""

    def __init__(self, command: str, executable: Optional[str], reason: str):
        super().__init__(f"cannot run {executable or command!r}: {reason}")
        self.command = command
        self.executable = executable
        self.reason = reason
