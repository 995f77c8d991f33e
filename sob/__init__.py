"""
sob - a small statically-declared C++ build system

Targets and their sources are plain data; sob turns them into the compile
and link commands of the host toolchain (g++, clang++, cl or clang-cl)
and runs them one at a time.

Example:
    >>> from sob import BuildGraph, BuildSession, select_descriptor
    >>> graph = BuildGraph()
    >>> graph.declare("app", ["a.cpp", "b.cpp"])
    >>> result = BuildSession(graph, select_descriptor("gcc")).build_all()
    >>> if result.success:
    ...     print("Build successful!")

Version: 0.1.0
"""

__version__ = "0.1.0"
__author__ = "sob Team"

from .core import BuildGraph, BuildSession, SourceNode, TargetDeclaration
from .errors import (
    BuildError,
    CompileFailure,
    InvalidDeclaration,
    LinkFailure,
    ManifestError,
    ProcessSpawnFailure,
    ToolchainNotFound,
)
from .utils.toolchain import ToolchainDescriptor, select_descriptor

__all__ = [
    "__version__",
    "__author__",
    "BuildGraph",
    "BuildSession",
    "SourceNode",
    "TargetDeclaration",
    "ToolchainDescriptor",
    "select_descriptor",
    "BuildError",
    "CompileFailure",
    "InvalidDeclaration",
    "LinkFailure",
    "ManifestError",
    "ProcessSpawnFailure",
    "ToolchainNotFound",
]
