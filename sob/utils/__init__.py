"""
Utility modules for sob.

This package contains toolchain descriptors, process execution and
session settings.
"""

from .toolchain import Toolchain, ToolchainDescriptor, ToolchainDetector, select_descriptor
from .process import CommandRunner, ProcessResult
from .settings import Settings

__all__ = [
    "Toolchain",
    "ToolchainDescriptor",
    "ToolchainDetector",
    "select_descriptor",
    "CommandRunner",
    "ProcessResult",
    "Settings",
]
