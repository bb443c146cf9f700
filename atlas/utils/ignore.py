"""File ignore rules handling using pathspec."""

from pathlib import Path
from typing import Iterable, Optional

import pathspec

from atlas.constants import BUILTIN_IGNORES


class IgnoreRules:
    """Handles ignore rules from .gitignore, .atlasignore and config."""

    def __init__(self, project_root: Path, extra_patterns: Optional[Iterable[str]] = None):
        """Initialize ignore rules.

        Args:
            project_root: Root directory to search for ignore files
            extra_patterns: Additional patterns (e.g. from .atlas/config.json)
        """
        self.project_root = project_root
        self.extra_patterns = list(extra_patterns or [])
        self.spec = self._build_spec()

    def _build_spec(self) -> pathspec.PathSpec:
        """Build combined PathSpec from all ignore sources."""
        patterns = list(BUILTIN_IGNORES)

        # .atlasignore is read last so it can re-include with "!pattern"
        for filename in (".gitignore", ".atlasignore"):
            ignore_path = self.project_root / filename
            if ignore_path.exists():
                try:
                    patterns.extend(ignore_path.read_text().splitlines())
                except OSError:
                    pass

        patterns.extend(self.extra_patterns)

        # Filter out empty lines and comments
        patterns = [p.strip() for p in patterns if p.strip() and not p.strip().startswith("#")]

        return pathspec.PathSpec.from_lines("gitwildmatch", patterns)

    def should_ignore(self, path: Path) -> bool:
        """Check if a path should be ignored.

        Args:
            path: Path to check (can be absolute or relative)

        Returns:
            True if the path should be ignored
        """
        try:
            rel_path = path.relative_to(self.project_root) if path.is_absolute() else path
        except ValueError:
            # Outside project root
            return True

        candidate = rel_path.as_posix()
        # Directory patterns ("build/") only match with a trailing slash
        if path.is_dir():
            candidate += "/"

        return self.spec.match_file(candidate)
