"""
Glob pattern compiler for route keys.

Wildcards (matched per ``/``-delimited segment):

    ?          Single character
    #          One or more digits
    *          One or more characters
    **         Any number of whole segments, including none
    [abc]      Character 'a', 'b' or 'c'
    [a-z]      Character 'a' to 'z' (``[!a-z]`` negates)
    {png,gif}  Literally 'png' or 'gif'

Characters that collide with the wildcard syntax are written URL encoded
(``%5B`` for ``[``) and decoded before comparison.

A segment made of a single wildcard, a colon and a name captures that
segment under the name: ``/users/#:id``, ``/posts/*:slug``,
``/files/**:path``. Without the colon the name is literal text, so
``#px`` is digits followed by ``px``. Write ``%3A`` for a literal colon
directly after a wildcard.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from urllib.parse import unquote

from signpost.exceptions import PatternError
from signpost.types import Bindings
from signpost.url import split_url


RECURSIVE = "**"

# Regex for each single-character wildcard
TOKEN_PATTERNS: dict[str, str] = {
    "?": r"[^/]",
    "#": r"\d+",
    "*": r"[^/]+",
}

# Segment that is one wildcard, a colon and a capture name
NAMED_CAPTURE: re.Pattern[str] = re.compile(r"(\*\*|[?#*]):([A-Za-z_]\w*)")


@dataclass(frozen=True, slots=True)
class Segment:
    """Compiled form of one pattern segment."""

    source: str
    regex: re.Pattern[str] | None
    name: str | None = None

    @property
    def recursive(self) -> bool:
        return self.regex is None

    def matches(self, value: str) -> bool:
        return self.regex is not None and self.regex.fullmatch(value) is not None


@dataclass(frozen=True, slots=True)
class Matcher:
    """
    Compiled route pattern.

    Immutable and free of external state, so a single instance is safely
    shared between routers and threads.
    """

    pattern: str
    segments: tuple[Segment, ...]

    @property
    def slots(self) -> tuple[str | None, ...]:
        """Binding name per segment position, ``None`` for unnamed segments."""
        return tuple(segment.name for segment in self.segments)

    @property
    def recursive(self) -> bool:
        return any(segment.recursive for segment in self.segments)

    def match(self, path: str) -> Bindings | None:
        """
        Match a path against the pattern.
        Returns the named bindings if matched, None otherwise.
        """
        return self.match_parts(split_url(path))

    def match_parts(self, parts: list[str]) -> Bindings | None:
        fixed = sum(1 for segment in self.segments if not segment.recursive)
        if len(parts) < fixed or (not self.recursive and len(parts) != fixed):
            return None

        spans: list[tuple[int, int]] = []
        if not self._align(parts, 0, 0, spans):
            return None

        bindings: Bindings = {}
        for segment, (start, end) in zip(self.segments, spans):
            if segment.name is not None:
                bindings[segment.name] = "/".join(parts[start:end])
        return bindings

    def _align(
        self,
        parts: list[str],
        seg_idx: int,
        part_idx: int,
        spans: list[tuple[int, int]],
    ) -> bool:
        if seg_idx == len(self.segments):
            return part_idx == len(parts)

        segment = self.segments[seg_idx]

        if segment.recursive:
            # Greedy: try the widest span first, shrink on failure
            for end in range(len(parts), part_idx - 1, -1):
                spans.append((part_idx, end))
                if self._align(parts, seg_idx + 1, end, spans):
                    return True
                spans.pop()
            return False

        if part_idx < len(parts) and segment.matches(parts[part_idx]):
            spans.append((part_idx, part_idx + 1))
            if self._align(parts, seg_idx + 1, part_idx + 1, spans):
                return True
            spans.pop()
        return False


@lru_cache(maxsize=None)
def compile_pattern(pattern: str) -> Matcher:
    """
    Compile a route key into a Matcher.

    Raises:
        PatternError: If ``**`` is used inside a segment or a character
                      class or alternation is not terminated.
    """
    segments = tuple(_compile_segment(pattern, raw) for raw in split_url(pattern))
    return Matcher(pattern=pattern, segments=segments)


def _compile_segment(pattern: str, raw: str) -> Segment:
    if raw == RECURSIVE:
        return Segment(raw, None)

    named = NAMED_CAPTURE.fullmatch(raw)
    if named:
        token, name = named.groups()
        if token == RECURSIVE:
            return Segment(raw, None, name)
        return Segment(raw, re.compile(TOKEN_PATTERNS[token]), name)

    return Segment(raw, re.compile(_translate(pattern, raw)))


def _translate(pattern: str, raw: str) -> str:
    """Translate a single segment into a regular expression."""
    out: list[str] = []
    literal: list[str] = []

    def flush() -> None:
        if literal:
            out.append(re.escape(unquote("".join(literal))))
            literal.clear()

    i = 0
    while i < len(raw):
        char = raw[i]

        if char in TOKEN_PATTERNS:
            if raw.startswith(RECURSIVE, i):
                raise PatternError(pattern, "'**' must be a whole path segment")
            flush()
            out.append(TOKEN_PATTERNS[char])
            i += 1
        elif char == "[":
            end = raw.find("]", i + 1)
            if end == -1:
                raise PatternError(pattern, "unterminated character class")
            flush()
            out.append(_char_class(pattern, raw[i + 1:end]))
            i = end + 1
        elif char == "{":
            end = raw.find("}", i + 1)
            if end == -1:
                raise PatternError(pattern, "unterminated alternation")
            flush()
            choices = (re.escape(unquote(choice)) for choice in raw[i + 1:end].split(","))
            out.append("(?:" + "|".join(choices) + ")")
            i = end + 1
        else:
            literal.append(char)
            i += 1

    flush()
    return "".join(out)


def _char_class(pattern: str, body: str) -> str:
    negate = body[:1] in ("!", "^")
    if negate:
        body = body[1:]

    body = unquote(body)
    if not body:
        raise PatternError(pattern, "empty character class")

    escaped = "".join("\\" + c if c in "\\[]^" else c for c in body)
    return f"[{'^' if negate else ''}{escaped}]"
