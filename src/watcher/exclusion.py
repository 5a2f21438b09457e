"""
DotWatch Exclusion Filter.

Decides whether a batch of changed paths should trigger a deploy.
Requires Python 3.11+.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from utils.logger import LoggerMixin
from watcher.errors import FilterConstructionError, PatternError
from watcher.patterns import PathPattern, is_absolute, normalize_path

VCS_DIRECTORY = ".git"
SYMLINK_TEST_SENTINEL = "DOTTER_SYMLINK_TEST"


def _resolve_absolute(path: Path | str) -> Path | str:
    """
    Resolve symlinks in an absolute path.

    Watchdog reports events under the resolved watch root, so absolute
    patterns must be resolved the same way. Relative paths are kept as
    given and matched against the root-relative event path.
    """
    candidate = Path(path)
    if candidate.is_absolute():
        return candidate.resolve()
    return path


@dataclass(frozen=True)
class ExclusionRule:
    """A path pattern whose match marks a path as irrelevant."""

    name: str
    pattern: PathPattern

    def excludes(self, absolute: str, relative: str | None) -> bool:
        """
        Check the rule against both forms of a path.

        Absolute patterns see the absolute path. Relative patterns see the
        path relative to the watch root and never match outside it.
        """
        if self.pattern.is_absolute:
            return self.pattern.matches(absolute)
        if relative is None:
            return False
        return self.pattern.matches(relative)


class ExclusionFilter(LoggerMixin):
    """
    Ordered, immutable set of exclusion rules.

    A batch is relevant iff at least one of its paths is matched by no rule.
    """

    def __init__(self, rules: Sequence[ExclusionRule], root: Path | str | None = None) -> None:
        """
        Initialize the filter.

        Args:
            rules: Exclusion rules, evaluated in order
            root: Watch root used to relativize absolute paths
        """
        self._rules = tuple(rules)
        self._root = normalize_path(Path(root) if root is not None else Path.cwd())

    @classmethod
    def build(
        cls,
        cache_dir: Path | str,
        cache_file: Path | str,
        root: Path | str | None = None,
    ) -> "ExclusionFilter":
        """
        Build the standard filter for a deployment cache.

        Args:
            cache_dir: Cache directory, excluded with everything below it
            cache_file: Cache file path
            root: Watch root (defaults to the current working directory)

        Raises:
            FilterConstructionError: If any rule pattern is malformed
        """
        cache_dir_pattern = normalize_path(_resolve_absolute(cache_dir))
        cache_file_pattern = normalize_path(_resolve_absolute(cache_file))
        try:
            rules = [
                ExclusionRule("cache_directory", PathPattern.glob(f"{cache_dir_pattern}/**")),
                ExclusionRule("cache_file", PathPattern.glob(cache_file_pattern)),
                ExclusionRule("vcs", PathPattern.glob(f"{VCS_DIRECTORY}/**")),
                ExclusionRule("symlink_test", PathPattern.exact(SYMLINK_TEST_SENTINEL)),
            ]
        except PatternError as e:
            raise FilterConstructionError(f"cannot build exclusion filter: {e}") from e
        return cls(rules, root=_resolve_absolute(root) if root is not None else None)

    @property
    def rules(self) -> tuple[ExclusionRule, ...]:
        return self._rules

    @property
    def root(self) -> str:
        return self._root

    def _split(self, path: object) -> tuple[str, str | None]:
        """Return (absolute, root-relative or None) forms of a path."""
        normalized = normalize_path(path)
        if not is_absolute(normalized):
            absolute = f"{self._root.rstrip('/')}/{normalized}" if normalized else self._root
            return absolute, normalized

        root = self._root.rstrip("/")
        if normalized == self._root:
            return normalized, ""
        if normalized.startswith(root + "/"):
            return normalized, normalized[len(root) + 1 :]
        return normalized, None

    def is_excluded(self, path: object) -> bool:
        """Check if any rule excludes a single path."""
        absolute, relative = self._split(path)
        return any(rule.excludes(absolute, relative) for rule in self._rules)

    def relevant_paths(self, batch: Iterable[object]) -> list[str]:
        """Get the paths of a batch that no rule excludes, in order."""
        return [normalize_path(path) for path in batch if not self.is_excluded(path)]

    def is_relevant(self, batch: Iterable[object]) -> bool:
        """Check if at least one path in the batch is not excluded."""
        return any(not self.is_excluded(path) for path in batch)
