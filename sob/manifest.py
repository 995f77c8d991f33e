"""
Build manifest loading for sob.

A manifest is a TOML file declaring targets, an optional build directory
and optional per-toolchain mandatory flags:

    [build]
    build_dir = "build/"

    [toolchain.gcc]
    ldflags = ["`llvm-config --cxxflags --ldflags --system-libs --libs all`"]

    [[target]]
    name = "toy"
    sources = ["toy.cpp"]
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .core.graph import BuildGraph
from .errors import ManifestError
from .utils.toolchain import Toolchain, ToolchainDescriptor

DEFAULT_MANIFEST = "sob.toml"


@dataclass(frozen=True)
class ToolchainFlags:
    """Extra mandatory flags a manifest adds to one toolchain."""
    cxxflags: tuple = ()
    ldflags: tuple = ()


@dataclass
class Manifest:
    """A loaded build manifest.

    Attributes:
        graph: Declared targets
        build_dir: Build-output directory override, if any
        toolchain_flags: Extra flags keyed by toolchain name
        path: File the manifest was read from
    """
    graph: BuildGraph
    build_dir: Optional[str] = None
    toolchain_flags: Dict[str, ToolchainFlags] = field(default_factory=dict)
    path: Optional[Path] = None

    def apply(self, descriptor: ToolchainDescriptor) -> ToolchainDescriptor:
        """Return the descriptor extended with this manifest's settings."""
        flags = self.toolchain_flags.get(descriptor.name)
        if flags is not None:
            descriptor = descriptor.with_flags(flags.cxxflags, flags.ldflags)
        if self.build_dir:
            descriptor = descriptor.with_build_prefix(self.build_dir)
        return descriptor


def load_manifest(path: Path) -> Manifest:
    """Read a manifest file.

    Args:
        path: Path to the TOML manifest

    Returns:
        Manifest: The parsed manifest

    Raises:
        ManifestError: If the file is missing, unparsable or malformed
        InvalidDeclaration: If a target is invalid or declared twice
    """
    path = Path(path)
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        raise ManifestError(f"manifest not found: {path}") from None
    except OSError as e:
        raise ManifestError(f"cannot read manifest {path}: {e.strerror or e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ManifestError(f"{path}: {e}") from e
    manifest = parse_manifest(data)
    manifest.path = path
    return manifest


def parse_manifest(data: dict) -> Manifest:
    """Build a Manifest from already-decoded TOML data."""
    targets = data.get("target", [])
    if not isinstance(targets, list):
        raise ManifestError("'target' must be an array of tables ([[target]])")

    graph = BuildGraph()
    for i, entry in enumerate(targets):
        if not isinstance(entry, dict) or "name" not in entry:
            raise ManifestError(f"target #{i + 1} has no name")
        sources = entry.get("sources", [])
        if not isinstance(sources, list) or not all(isinstance(s, str) for s in sources):
            raise ManifestError(f"target {entry['name']!r}: sources must be a list of strings")
        graph.declare(str(entry["name"]), sources)

    build = data.get("build", {})
    if not isinstance(build, dict):
        raise ManifestError("'build' must be a table")
    build_dir = build.get("build_dir")
    if build_dir is not None and not isinstance(build_dir, str):
        raise ManifestError("build.build_dir must be a string")

    return Manifest(
        graph=graph,
        build_dir=build_dir,
        toolchain_flags=_parse_toolchain_flags(data.get("toolchain", {})),
    )


def _parse_toolchain_flags(section) -> Dict[str, ToolchainFlags]:
    if not isinstance(section, dict):
        raise ManifestError("'toolchain' must be a table")
    known = {tc.value for tc in Toolchain}
    result = {}
    for name, table in section.items():
        if name not in known:
            raise ManifestError(f"unknown toolchain in manifest: {name!r}")
        if not isinstance(table, dict):
            raise ManifestError(f"toolchain.{name} must be a table")
        result[name] = ToolchainFlags(
            cxxflags=tuple(_flag_list(table, name, "cxxflags")),
            ldflags=tuple(_flag_list(table, name, "ldflags")),
        )
    return result


def _flag_list(table: dict, toolchain: str, key: str) -> List[str]:
    value = table.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ManifestError(f"toolchain.{toolchain}.{key} must be a list of strings")
    return value
