"""
Core build module for sob.

This module contains the target graph and the resolver that turns it into
compile and link commands.
"""

from .graph import BuildGraph, SourceNode, TargetDeclaration
from .builder import BuildSession, SessionResult, TargetBuilder, TargetResult, TargetState

__all__ = [
    "BuildGraph",
    "SourceNode",
    "TargetDeclaration",
    "BuildSession",
    "SessionResult",
    "TargetBuilder",
    "TargetResult",
    "TargetState",
]
