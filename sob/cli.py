"""
Command-line interface for sob.

Provides the main entry point with subcommands for building the targets
of a manifest and inspecting toolchains.
"""

import argparse
import logging
import sys
from pathlib import Path

from .core import BuildSession
from .errors import InvalidDeclaration, ManifestError, ProcessSpawnFailure, ToolchainNotFound
from .manifest import DEFAULT_MANIFEST, load_manifest
from .utils.settings import DEFAULT_SETTINGS, Settings
from .utils.toolchain import DESCRIPTORS, ToolchainDetector, select_descriptor

EXIT_OK = 0
EXIT_TARGET_FAILED = 1
EXIT_BAD_INPUT = 2
EXIT_ENVIRONMENT = 3


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI.

    Returns:
        argparse.ArgumentParser: The configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="sob",
        description="sob: statically-declared C++ build system",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m sob build
  python -m sob build -f examples/toy/sob.toml --toolchain gcc
  python -m sob build app --dry-run
  python -m sob list
        """
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_manifest_options(p):
        p.add_argument(
            "-f", "--file",
            type=str,
            default=DEFAULT_MANIFEST,
            help=f"Build manifest (default: {DEFAULT_MANIFEST})"
        )
        p.add_argument(
            "--toolchain",
            choices=DEFAULT_SETTINGS.toolchain_choices,
            default=DEFAULT_SETTINGS.toolchain,
            help="Compiler toolchain to use (default: auto)"
        )
        p.add_argument(
            "--build-dir",
            type=str,
            default=None,
            help="Directory for object files (default: from the toolchain or manifest)"
        )
        p.add_argument(
            "-v", "--verbose",
            action="store_true",
            help="Enable verbose output"
        )

    # Build command
    build_parser = subparsers.add_parser(
        "build",
        help="Build the targets declared in a manifest"
    )
    add_manifest_options(build_parser)
    build_parser.add_argument(
        "targets",
        nargs="*",
        help="Targets to build (default: all)"
    )
    build_parser.add_argument(
        "-j", "--jobs",
        type=int,
        default=1,
        help="Number of targets to build at the same time (default: 1)"
    )
    build_parser.add_argument(
        "--incremental",
        action="store_true",
        help="Skip sources whose object file is newer than the source"
    )
    build_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the commands without running them"
    )
    build_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-command timeout in seconds"
    )

    # List command
    list_parser = subparsers.add_parser(
        "list",
        help="List declared targets and their object files"
    )
    add_manifest_options(list_parser)

    subparsers.add_parser(
        "toolchains",
        help="List toolchains found on this system"
    )

    subparsers.add_parser(
        "version",
        help="Show version information"
    )

    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S"
    )


def _settings_from(args: argparse.Namespace, project_root: Path) -> Settings:
    return Settings(
        toolchain=args.toolchain,
        build_dir=args.build_dir,
        project_root=project_root,
        jobs=getattr(args, "jobs", 1),
        incremental=getattr(args, "incremental", False),
        dry_run=getattr(args, "dry_run", False),
        timeout=getattr(args, "timeout", None),
        verbose=args.verbose,
    )


def _load(args: argparse.Namespace):
    manifest = load_manifest(Path(args.file))
    settings = _settings_from(args, manifest.path.parent)
    descriptor = manifest.apply(select_descriptor(settings.toolchain))
    return manifest, settings, descriptor


def handle_build(args: argparse.Namespace) -> int:
    """Handle the build command.

    Args:
        args: Parsed command-line arguments

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    try:
        manifest, settings, descriptor = _load(args)
        graph = manifest.graph.select(args.targets) if args.targets else manifest.graph
        session = BuildSession(graph, descriptor, settings=settings)
    except (ManifestError, InvalidDeclaration, KeyError, ValueError) as e:
        print(f"[sob] Error: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT
    except ToolchainNotFound as e:
        print(f"[sob] Error: {e}", file=sys.stderr)
        return EXIT_ENVIRONMENT

    if args.verbose:
        print(f"[sob] Manifest: {manifest.path}")
        print(f"[sob] Toolchain: {session.descriptor.name}")
        print(f"[sob] Build dir: {session.descriptor.build_prefix}")

    try:
        result = session.build_all()
    except ProcessSpawnFailure as e:
        print(f"[sob] Error: {e}", file=sys.stderr)
        return EXIT_ENVIRONMENT

    for r in result.results:
        if r.success:
            print(f"[sob] Built: {r.artifact}")
        else:
            print(f"[sob] Failed: {r.target}: {r.error}", file=sys.stderr)
    print(f"[sob] {result.summary()}")
    if session.rejected:
        return EXIT_BAD_INPUT
    return EXIT_OK if result.success else EXIT_TARGET_FAILED


def handle_list(args: argparse.Namespace) -> int:
    """Handle the list command."""
    try:
        manifest, settings, descriptor = _load(args)
        session = BuildSession(manifest.graph, descriptor, settings=settings)
    except (ManifestError, InvalidDeclaration, ValueError) as e:
        print(f"[sob] Error: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT
    except ToolchainNotFound as e:
        print(f"[sob] Error: {e}", file=sys.stderr)
        return EXIT_ENVIRONMENT

    for target in manifest.graph:
        if target.name in session.rejected:
            print(f"{target.name}: rejected: {session.rejected[target.name]}")
            continue
        builder = session.builders[target.name]
        print(f"{builder.artifact}:")
        for source, obj in zip(target.sources, builder.object_paths):
            print(f"  {source.path} -> {obj}")
    return EXIT_BAD_INPUT if session.rejected else EXIT_OK


def handle_toolchains(args: argparse.Namespace) -> int:
    """Handle the toolchains command."""
    detector = ToolchainDetector()
    available = detector.list_available()
    default = detector.detect()
    for tc in detector.priority:
        path = detector.get_compiler_path(tc)
        marker = "*" if tc == default else " "
        print(f"{marker} {tc.value:<9} {DESCRIPTORS[tc].cxx:<9} {path or 'not found'}")
    return EXIT_OK if available else EXIT_ENVIRONMENT


def handle_version(args: argparse.Namespace) -> int:
    """Handle the version command.

    Args:
        args: Parsed command-line arguments

    Returns:
        int: Exit code (always 0 for version)
    """
    from . import __version__, __author__
    print(f"sob version {__version__}")
    print(f"Author: {__author__}")
    return EXIT_OK


def main(argv: list = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Optional command-line arguments (defaults to sys.argv)

    Returns:
        int: Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(getattr(args, "verbose", False))

    if args.command == "build":
        return handle_build(args)
    elif args.command == "list":
        return handle_list(args)
    elif args.command == "toolchains":
        return handle_toolchains(args)
    elif args.command == "version":
        return handle_version(args)
    else:
        parser.print_help()
        return 2


if __name__ == "__main__":
    sys.exit(main())
