"""
DotWatch Path Pattern Matcher.

Exact and glob matching on slash-normalized path strings.
Requires Python 3.11+.
"""

import re
from dataclasses import dataclass, field
from enum import Enum

from watcher.errors import PatternError

_REPEATED_SEPARATORS = re.compile(r"/{2,}")
_DRIVE_PREFIX = re.compile(r"^[A-Za-z]:/")


class PatternKind(str, Enum):
    """Kinds of path patterns."""

    EXACT = "exact"
    GLOB = "glob"


def normalize_path(path: object) -> str:
    """
    Normalize a path to forward-slash form.

    Backslashes become slashes, repeated separators collapse, and leading
    ``./`` components and a trailing slash are dropped.
    """
    text = str(path).replace("\\", "/")
    text = _REPEATED_SEPARATORS.sub("/", text)
    while text.startswith("./"):
        text = text[2:]
    if text == ".":
        return ""
    if len(text) > 1 and text.endswith("/"):
        text = text.rstrip("/") or "/"
    return text


def is_absolute(path: str) -> bool:
    """Check if a normalized path is absolute (POSIX root or drive letter)."""
    return path.startswith("/") or bool(_DRIVE_PREFIX.match(path))


def _translate_segment(segment: str, pattern: str) -> str:
    """Translate one path segment of a glob into a regex fragment."""
    out: list[str] = []
    i, n = 0, len(segment)
    while i < n:
        ch = segment[i]
        i += 1
        if ch == "*":
            # Consecutive stars inside a segment behave like one
            while i < n and segment[i] == "*":
                i += 1
            out.append("[^/]*")
        elif ch == "?":
            out.append("[^/]")
        elif ch == "[":
            j = i
            if j < n and segment[j] in "!^":
                j += 1
            # A closing bracket right after the opener is a literal member
            if j < n and segment[j] == "]":
                j += 1
            close = segment.find("]", j)
            if close == -1:
                raise PatternError(pattern, "unclosed character class")
            body = segment[i:close]
            i = close + 1
            negate = body[:1] in ("!", "^")
            if negate:
                body = body[1:]
            body = body.replace("\\", "\\\\").replace("]", "\\]")
            if negate:
                out.append(f"[^/{body}]")
            else:
                out.append(f"[{body}]")
        else:
            out.append(re.escape(ch))
    return "".join(out)


def translate_glob(pattern: str) -> str:
    """
    Translate a glob into an anchored regex source.

    ``**`` as a whole segment matches zero or more segments. A trailing
    ``/**`` therefore also matches the directory itself.
    """
    segments = pattern.split("/")
    last = len(segments) - 1
    out: list[str] = []
    joined = False
    for index, segment in enumerate(segments):
        if segment == "**":
            if index == last:
                out.append("(?:/.*)?" if index > 0 else ".*")
            else:
                out.append("(?:.*/)?" if index == 0 else "/(?:.*/)?")
                joined = True
            continue
        if index > 0 and not joined:
            out.append("/")
        out.append(_translate_segment(segment, pattern))
        joined = False
    return r"\A" + "".join(out) + r"\Z"


@dataclass(frozen=True)
class PathPattern:
    """A compiled exact or glob path pattern."""

    text: str
    kind: PatternKind
    _regex: re.Pattern[str] | None = field(default=None, repr=False, compare=False)

    @classmethod
    def exact(cls, text: str) -> "PathPattern":
        """Build a pattern matching one normalized path string."""
        return cls(text=normalize_path(text), kind=PatternKind.EXACT)

    @classmethod
    def glob(cls, text: str) -> "PathPattern":
        """
        Build a glob pattern.

        Raises:
            PatternError: If the glob is malformed
        """
        normalized = normalize_path(text)
        source = translate_glob(normalized)
        try:
            regex = re.compile(source)
        except re.error as e:
            raise PatternError(text, str(e)) from e
        return cls(text=normalized, kind=PatternKind.GLOB, _regex=regex)

    @property
    def is_absolute(self) -> bool:
        return is_absolute(self.text)

    def matches(self, path: str) -> bool:
        """Check whether the whole normalized path matches."""
        candidate = normalize_path(path)
        if self._regex is None:
            return candidate == self.text
        return self._regex.match(candidate) is not None


def matches(pattern: PathPattern, path: str) -> bool:
    """Check whether a path matches a pattern."""
    return pattern.matches(path)
