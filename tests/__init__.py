"""
Test suite for sob.

This package contains unit tests for the toolchain descriptors, the
target graph, the build resolver, manifest loading and the CLI.
"""

__version__ = "0.1.0"
