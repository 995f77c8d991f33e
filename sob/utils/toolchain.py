"""
Toolchain descriptors and detection for sob.

This module describes how each supported compiler family is invoked
(executable name, flag spelling, output-file naming) and detects which
of them are available on the host.
"""

import shlex
import shutil
import subprocess
import sys
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import PurePosixPath, PureWindowsPath
from typing import Iterable, Optional, Sequence, Tuple

from ..errors import ToolchainNotFound


class Toolchain(Enum):
    """Supported C++ compiler toolchains."""
    GCC = "gcc"
    CLANG = "clang"
    MSVC = "msvc"
    CLANG_CL = "clang-cl"


@dataclass(frozen=True)
class ToolchainDescriptor:
    """How one compiler/linker pair is invoked.

    Descriptors are pure data: every method builds a string and none of
    them touch the filesystem or spawn a process.

    Attributes:
        name: Toolchain identifier (matches a Toolchain value)
        cxx: Compiler driver executable, also used to link
        compile_flag: Switch requesting compile-only output
        obj_prefix: Text placed before the object path in a compile command
        obj_postfix: Object file extension
        bin_prefix: Text placed before the artifact path in a link command
        bin_postfix: Final artifact extension
        build_prefix: Build-output directory, with trailing separator
        cxxflags: Mandatory flags for every compile command
        ldflags: Mandatory flags for every link command
        quoting: Command-line quoting rules for paths, "posix" or "windows"

    Example:
        >>> GCC.compile_command("a.cpp")
        'g++ -c a.cpp -o build/a.o'
    """
    name: str
    cxx: str
    compile_flag: str
    obj_prefix: str
    obj_postfix: str
    bin_prefix: str
    bin_postfix: str = ""
    build_prefix: str = "build/"
    cxxflags: Tuple[str, ...] = ()
    ldflags: Tuple[str, ...] = ()
    quoting: str = "posix"

    def object_path_for(self, source_path: str, subdir: Optional[str] = None) -> str:
        """Map a source path to its object path beneath the build directory.

        Args:
            source_path: Source file path relative to the project root
            subdir: Optional directory inserted under the build prefix

        Returns:
            str: Object path, always using forward slashes
        """
        parts = [p for p in _split_source(source_path) if p not in ("", ".", "..")]
        stem = PurePosixPath(*parts).with_suffix("") if parts else PurePosixPath("_")
        if subdir:
            stem = PurePosixPath(subdir) / stem
        return f"{self.build_prefix}{stem.as_posix()}{self.obj_postfix}"

    def artifact_path_for(self, artifact_name: str) -> str:
        """Return the final artifact path for a target name."""
        if self.bin_postfix and not artifact_name.endswith(self.bin_postfix):
            return artifact_name + self.bin_postfix
        return artifact_name

    def compile_command(self, source_path: str, object_path: Optional[str] = None) -> str:
        """Build the compiler invocation producing one object file.

        Args:
            source_path: Source file to compile
            object_path: Object output path (defaults to object_path_for())

        Returns:
            str: The full command line
        """
        if object_path is None:
            object_path = self.object_path_for(source_path)
        words = [self.cxx, self.compile_flag, *self.cxxflags, self.quote(source_path)]
        return " ".join(w for w in words if w) + self.obj_prefix + self.quote(object_path)

    def link_command(self, object_paths: Sequence[str], artifact_name: str) -> str:
        """Build the linker invocation combining objects into one artifact.

        Args:
            object_paths: Object files, in the order they are passed to the linker
            artifact_name: Target name of the final artifact

        Returns:
            str: The full command line
        """
        command = " ".join([self.cxx, *(self.quote(p) for p in object_paths)])
        command += self.bin_prefix + self.quote(self.artifact_path_for(artifact_name))
        if self.ldflags:
            command += " " + " ".join(self.ldflags)
        return command

    def quote(self, path: str) -> str:
        """Quote one path for the shell; flags are never passed through here."""
        if self.quoting == "windows":
            return subprocess.list2cmdline([path])
        return shlex.quote(path)

    def with_flags(self, cxxflags: Iterable[str] = (), ldflags: Iterable[str] = ()) -> "ToolchainDescriptor":
        """Return a copy with extra mandatory flags appended per phase."""
        return replace(
            self,
            cxxflags=self.cxxflags + tuple(cxxflags),
            ldflags=self.ldflags + tuple(ldflags),
        )

    def with_build_prefix(self, build_dir: str) -> "ToolchainDescriptor":
        """Return a copy writing objects beneath another build directory."""
        prefix = build_dir.replace("\\", "/")
        if not prefix.endswith("/"):
            prefix += "/"
        return replace(self, build_prefix=prefix)


def _split_source(source_path: str) -> Tuple[str, ...]:
    # Drive letters and roots are dropped so objects stay under the build dir
    if "\\" in source_path or PureWindowsPath(source_path).drive:
        path = PureWindowsPath(source_path)
        return path.parts[1:] if path.anchor else path.parts
    path = PurePosixPath(source_path)
    return path.parts[1:] if path.anchor else path.parts


GCC = ToolchainDescriptor(
    name=Toolchain.GCC.value,
    cxx="g++",
    compile_flag="-c",
    obj_prefix=" -o ",
    obj_postfix=".o",
    bin_prefix=" -o ",
)

CLANG = replace(GCC, name=Toolchain.CLANG.value, cxx="clang++")

MSVC = ToolchainDescriptor(
    name=Toolchain.MSVC.value,
    cxx="cl",
    compile_flag="/c",
    obj_prefix=" /Fo:",
    obj_postfix=".obj",
    bin_prefix=" /Fe:",
    bin_postfix=".exe",
    quoting="windows",
    cxxflags=("/std:c++17",),
)

CLANG_CL = replace(MSVC, name=Toolchain.CLANG_CL.value, cxx="clang-cl")

DESCRIPTORS = {
    Toolchain.GCC: GCC,
    Toolchain.CLANG: CLANG,
    Toolchain.MSVC: MSVC,
    Toolchain.CLANG_CL: CLANG_CL,
}


class ToolchainDetector:
    """Detects available C++ compilers on the system.

    Example:
        >>> detector = ToolchainDetector()
        >>> toolchain = detector.detect()
        >>> if toolchain:
        ...     print(f"Found: {toolchain.value}")
    """

    # MSVC family first on Windows, GCC family first elsewhere
    WINDOWS_PRIORITY = [Toolchain.MSVC, Toolchain.CLANG_CL, Toolchain.GCC, Toolchain.CLANG]
    POSIX_PRIORITY = [Toolchain.GCC, Toolchain.CLANG, Toolchain.MSVC, Toolchain.CLANG_CL]

    def __init__(self, priority: Optional[list] = None, which=shutil.which):
        """Initialize the detector.

        Args:
            priority: Optional custom priority order for toolchain selection
            which: Executable lookup function (shutil.which by default)
        """
        if priority is None:
            priority = self.WINDOWS_PRIORITY if sys.platform == "win32" else self.POSIX_PRIORITY
        self.priority = priority
        self._which = which

    def detect(self) -> Optional[Toolchain]:
        """Return the first available toolchain in priority order, or None."""
        for tc in self.priority:
            if self.is_available(tc):
                return tc
        return None

    def is_available(self, toolchain: Toolchain) -> bool:
        return self.get_compiler_path(toolchain) is not None

    def get_compiler_path(self, toolchain: Toolchain) -> Optional[str]:
        """Get the path to the compiler executable, or None if not found."""
        cxx = DESCRIPTORS[toolchain].cxx
        return self._which(cxx) or self._which(cxx + ".exe")

    def list_available(self) -> list:
        return [tc for tc in self.priority if self.is_available(tc)]


def select_descriptor(name: str = "auto", detector: Optional[ToolchainDetector] = None) -> ToolchainDescriptor:
    """Resolve a toolchain name to its descriptor.

    Args:
        name: "auto" or a Toolchain value
        detector: Detector used for "auto" (a default one if omitted)

    Returns:
        ToolchainDescriptor: The selected descriptor

    Raises:
        ValueError: If the name is not a known toolchain
        ToolchainNotFound: If "auto" finds no compiler on the host
    """
    if name == "auto":
        detected = (detector or ToolchainDetector()).detect()
        if detected is None:
            raise ToolchainNotFound("No supported C++ compiler found in PATH")
        return DESCRIPTORS[detected]
    try:
        return DESCRIPTORS[Toolchain(name)]
    except ValueError:
        raise ValueError(f"Unknown toolchain: {name}") from None
