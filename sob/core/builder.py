"""
Build graph resolution for sob.

TargetBuilder turns one TargetDeclaration into compile and link commands
for the active ToolchainDescriptor and runs them. BuildSession builds
every target of a BuildGraph and collects the results.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from ..errors import BuildError, CompileFailure, InvalidDeclaration, LinkFailure, TargetFailure
from ..utils.process import CommandRunner
from ..utils.settings import Settings
from ..utils.toolchain import ToolchainDescriptor
from .graph import BuildGraph, TargetDeclaration

logger = logging.getLogger(__name__)


class TargetState(Enum):
    """Progress of one target through its build."""
    PENDING = "pending"
    COMPILING = "compiling"
    LINKING = "linking"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class TargetResult:
    """Result of building one target.

    Attributes:
        target: Target name
        state: Final state (SUCCEEDED or FAILED)
        artifact: Path of the final artifact
        commands: Commands issued, in order
        skipped: Sources left alone because their object was up to date
        error: The declaration, compile or link failure, if any
    """
    target: str
    state: TargetState
    artifact: Optional[str] = None
    commands: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    error: Optional[BuildError] = None

    @property
    def success(self) -> bool:
        return self.state is TargetState.SUCCEEDED


@dataclass
class SessionResult:
    """Aggregate result of a build session, in declaration order."""
    results: List[TargetResult] = field(default_factory=list)

    @property
    def succeeded(self) -> List[TargetResult]:
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> List[TargetResult]:
        return [r for r in self.results if not r.success]

    @property
    def success(self) -> bool:
        return not self.failed

    def summary(self) -> str:
        text = f"{len(self.results)} target(s): {len(self.succeeded)} succeeded, {len(self.failed)} failed"
        if self.failed:
            text += " (" + ", ".join(r.target for r in self.failed) + ")"
        return text


class TargetBuilder:
    """Compiles and links one target.

    Sources are compiled one at a time in declaration order and the first
    failure stops the target. The link step only runs once every source
    compiled.

    Example:
        >>> builder = TargetBuilder(TargetDeclaration("app", ["a.cpp"]), GCC)
        >>> builder.plan()
        ['g++ -c a.cpp -o build/a.o', 'g++ build/a.o -o app']
    """

    def __init__(
        self,
        target: TargetDeclaration,
        descriptor: ToolchainDescriptor,
        runner: Optional[CommandRunner] = None,
        project_root: Path = Path("."),
        subdir: Optional[str] = None,
        incremental: bool = False,
        dry_run: bool = False,
    ):
        """Initialize the builder.

        Args:
            target: The target to build
            descriptor: Active toolchain descriptor
            runner: Process runner (a CommandRunner if omitted)
            project_root: Directory commands run in
            subdir: Per-target directory under the build prefix
            incremental: Skip sources whose object is newer than the source
            dry_run: Record commands without running them
        """
        self.target = target
        self.descriptor = descriptor
        self.runner = runner or CommandRunner()
        self.project_root = Path(project_root)
        self.subdir = subdir
        self.incremental = incremental
        self.dry_run = dry_run
        self.state = TargetState.PENDING
        self.index: Optional[int] = None

        objects = self.object_paths
        if len(set(objects)) != len(objects):
            clashes = sorted({o for o in objects if objects.count(o) > 1})
            raise InvalidDeclaration(
                f"target {target.name!r}: sources share object path(s) {', '.join(clashes)}"
            )

    @property
    def object_paths(self) -> List[str]:
        return [
            self.descriptor.object_path_for(s.path, subdir=self.subdir)
            for s in self.target.sources
        ]

    @property
    def artifact(self) -> str:
        return self.descriptor.artifact_path_for(self.target.name)

    def plan(self) -> List[str]:
        """Return every command a full build would issue, in order."""
        commands = [
            self.descriptor.compile_command(s.path, obj)
            for s, obj in zip(self.target.sources, self.object_paths)
        ]
        commands.append(self.descriptor.link_command(self.object_paths, self.target.name))
        return commands

    def build(self) -> TargetResult:
        """Build the target.

        Returns:
            TargetResult: SUCCEEDED, or FAILED with the compile/link error

        Raises:
            ProcessSpawnFailure: If the compiler or linker cannot be started
        """
        result = TargetResult(target=self.target.name, state=self.state, artifact=self.artifact)
        try:
            self._build(result)
        except TargetFailure as e:
            self._enter(TargetState.FAILED)
            result.error = e
            logger.error(str(e))
            if e.output:
                logger.error(e.output)
        else:
            self._enter(TargetState.SUCCEEDED)
        result.state = self.state
        return result

    def _build(self, result: TargetResult) -> None:
        if not self.dry_run:
            (self.project_root / self.descriptor.build_prefix).mkdir(parents=True, exist_ok=True)

        recompiled = False
        objects = self.object_paths
        for i, (source, obj) in enumerate(zip(self.target.sources, objects)):
            self._enter(TargetState.COMPILING, i)
            if self.incremental and self._up_to_date(obj, [source.path]):
                logger.debug(f"{self.target.name}: {obj} is up to date")
                result.skipped.append(source.path)
                continue
            command = self.descriptor.compile_command(source.path, obj)
            if not self.dry_run:
                (self.project_root / obj).parent.mkdir(parents=True, exist_ok=True)
            r = self._run(command, result)
            if r is not None and not r.ok:
                raise CompileFailure(self.target.name, source.path, r.returncode, r.output)
            recompiled = True

        self._enter(TargetState.LINKING)
        if self.incremental and not recompiled and self._up_to_date(self.artifact, objects):
            logger.debug(f"{self.target.name}: {self.artifact} is up to date")
            return
        r = self._run(self.descriptor.link_command(objects, self.target.name), result)
        if r is not None and not r.ok:
            raise LinkFailure(self.target.name, r.returncode, r.output)

    def _run(self, command: str, result: TargetResult):
        result.commands.append(command)
        logger.info(command)
        if self.dry_run:
            return None
        return self.runner.run(command, cwd=self.project_root)

    def _up_to_date(self, output: str, inputs: List[str]) -> bool:
        out = self.project_root / output
        if not out.exists():
            return False
        mtime = out.stat().st_mtime
        for name in inputs:
            path = self.project_root / name
            # a missing input is left for the compiler to report
            if not path.exists() or path.stat().st_mtime > mtime:
                return False
        return True

    def _enter(self, state: TargetState, index: Optional[int] = None) -> None:
        self.state = state
        self.index = index
        if index is None:
            logger.debug(f"{self.target.name}: {state.value}")
        else:
            logger.debug(f"{self.target.name}: {state.value} [{index + 1}/{len(self.target.sources)}]")


class BuildSession:
    """Builds every target of a graph with one toolchain descriptor.

    Every output path (object files and final artifact) belongs to exactly
    one target. A target that would write a path already claimed by an
    earlier target, or whose own sources share an object path, is rejected
    when the session is created and reported as FAILED; the other targets
    are still built.

    A failed target does not stop the session; the next target is still
    attempted. A ProcessSpawnFailure ends the session.
    """

    def __init__(
        self,
        graph: BuildGraph,
        descriptor: ToolchainDescriptor,
        runner: Optional[CommandRunner] = None,
        settings: Optional[Settings] = None,
    ):
        self.graph = graph
        self.settings = settings or Settings()
        if self.settings.build_dir:
            descriptor = descriptor.with_build_prefix(self.settings.build_dir)
        self.descriptor = descriptor
        self.runner = runner or CommandRunner(timeout=self.settings.timeout)
        self.builders: Dict[str, TargetBuilder] = {}
        self.rejected: Dict[str, InvalidDeclaration] = {}
        self._assign_outputs()

    def builder_for(self, target: TargetDeclaration) -> TargetBuilder:
        return TargetBuilder(
            target,
            self.descriptor,
            runner=self.runner,
            project_root=self.settings.project_root,
            # concurrent targets get their own object directory
            subdir=target.name if self.settings.jobs > 1 else None,
            incremental=self.settings.incremental,
            dry_run=self.settings.dry_run,
        )

    def _assign_outputs(self) -> None:
        owners: Dict[str, str] = {}
        for target in self.graph:
            try:
                builder = self.builder_for(target)
            except InvalidDeclaration as e:
                self._reject(target.name, e)
                continue
            outputs = builder.object_paths + [builder.artifact]
            clashes = [(path, owners[path]) for path in outputs if path in owners]
            if clashes:
                path, owner = clashes[0]
                self._reject(target.name, InvalidDeclaration(
                    f"target {target.name!r}: {path} is already written by target {owner!r}"
                ))
                continue
            for path in outputs:
                owners[path] = target.name
            self.builders[target.name] = builder

    def _reject(self, name: str, error: InvalidDeclaration) -> None:
        logger.error(str(error))
        self.rejected[name] = error

    def build_all(self) -> SessionResult:
        """Build all targets and return the aggregate result."""
        builders = list(self.builders.values())
        logger.info(f"Building {len(builders)} target(s) with {self.descriptor.name}")
        if self.settings.jobs > 1 and len(builders) > 1:
            with ThreadPoolExecutor(max_workers=self.settings.jobs) as pool:
                built = list(pool.map(TargetBuilder.build, builders))
        else:
            built = [b.build() for b in builders]

        by_name = {r.target: r for r in built}
        results = []
        for target in self.graph:
            if target.name in self.rejected:
                results.append(TargetResult(
                    target=target.name,
                    state=TargetState.FAILED,
                    error=self.rejected[target.name],
                ))
            else:
                results.append(by_name[target.name])
        session = SessionResult(results)
        logger.info(session.summary())
        return session
