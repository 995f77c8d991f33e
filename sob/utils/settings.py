"""
Configuration settings for sob.

This module contains default configuration values for one build session.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional


@dataclass
class Settings:
    """Build session settings.

    Attributes:
        toolchain: Toolchain to use ("auto" detects one)
        valid_toolchains: List of valid toolchain choices
        build_dir: Build-output directory, None keeps the descriptor's own
        project_root: Directory commands run in and paths are relative to
        jobs: Number of targets built at the same time
        incremental: Skip sources whose object is newer than the source
        dry_run: Compute and report commands without running them
        timeout: Optional per-command timeout in seconds
        verbose: Enable debug logging
    """
    toolchain: str = "auto"
    valid_toolchains: List[str] = None
    build_dir: Optional[str] = None
    project_root: Path = Path(".")
    jobs: int = 1
    incremental: bool = False
    dry_run: bool = False
    timeout: Optional[float] = None
    verbose: bool = False

    def __post_init__(self):
        if self.valid_toolchains is None:
            self.valid_toolchains = ["auto", "gcc", "clang", "msvc", "clang-cl"]
        if self.jobs < 1:
            raise ValueError(f"jobs must be at least 1, got {self.jobs}")
        self.project_root = Path(self.project_root)

    @property
    def toolchain_choices(self) -> List[str]:
        """Get the list of valid toolchain choices."""
        return self.valid_toolchains


# Global default settings instance
DEFAULT_SETTINGS = Settings()
