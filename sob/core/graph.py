"""
Target and source declarations for sob.

A build is a flat, two-level graph: each target owns an ordered list of
sources and never depends on another target.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Tuple, Union

from ..errors import InvalidDeclaration


@dataclass(frozen=True)
class SourceNode:
    """One compilable source file, relative to the project root."""
    path: str

    def __post_init__(self):
        if not self.path:
            raise InvalidDeclaration("source path must not be empty")

    def __str__(self) -> str:
        return self.path


SourceLike = Union[SourceNode, str]


@dataclass(frozen=True)
class TargetDeclaration:
    """One final artifact and the sources linked into it.

    Attributes:
        name: Artifact name, unique within a build session
        sources: Sources in declaration order (also the link order)

    Example:
        >>> app = TargetDeclaration("app", ["a.cpp", "b.cpp"])
        >>> [s.path for s in app.sources]
        ['a.cpp', 'b.cpp']
    """
    name: str
    sources: Tuple[SourceNode, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not self.name:
            raise InvalidDeclaration("target name must not be empty")
        if isinstance(self.sources, (str, SourceNode)):
            raise InvalidDeclaration(f"target {self.name!r}: sources must be a sequence")
        sources = tuple(s if isinstance(s, SourceNode) else SourceNode(s) for s in self.sources)
        if not sources:
            raise InvalidDeclaration(f"target {self.name!r} declares no sources")
        # frozen dataclass; normalize through object.__setattr__
        object.__setattr__(self, "sources", sources)


class BuildGraph:
    """The ordered set of targets declared for one build session."""

    def __init__(self, targets: Iterable[TargetDeclaration] = ()):
        self._targets: Dict[str, TargetDeclaration] = {}
        for target in targets:
            self.add(target)

    def add(self, target: TargetDeclaration) -> TargetDeclaration:
        """Add a target, rejecting a name that is already declared."""
        if target.name in self._targets:
            raise InvalidDeclaration(f"duplicate target name: {target.name!r}")
        self._targets[target.name] = target
        return target

    def declare(self, name: str, sources: Iterable[SourceLike]) -> TargetDeclaration:
        """Create and add a target in one call."""
        return self.add(TargetDeclaration(name, tuple(sources)))

    def get(self, name: str) -> TargetDeclaration:
        try:
            return self._targets[name]
        except KeyError:
            raise KeyError(f"unknown target: {name}") from None

    def select(self, names: Iterable[str]) -> "BuildGraph":
        """Return a graph holding only the named targets, in declaration order."""
        wanted = list(names)
        missing = [n for n in wanted if n not in self._targets]
        if missing:
            raise KeyError(f"unknown target(s): {', '.join(missing)}")
        return BuildGraph(t for t in self if t.name in wanted)

    @property
    def names(self) -> List[str]:
        return list(self._targets)

    def __iter__(self) -> Iterator[TargetDeclaration]:
        return iter(self._targets.values())

    def __len__(self) -> int:
        return len(self._targets)

    def __contains__(self, name: object) -> bool:
        return name in self._targets
