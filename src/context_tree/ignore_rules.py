"""Gitignore-style pattern compilation and rule-set evaluation.

Patterns are compiled one by one into :class:`CompiledRule` objects scoped to
the directory that declared them, then grouped into a :class:`RuleSet` that
answers "is this path ignored?".

The model is deliberately simpler than git's: every rule of the accumulated
set is considered for every path, and when negations are present the last
declared matching rule wins.
"""

from __future__ import annotations

import os
import re
from functools import cached_property
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, computed_field

from context_tree.file_manipulation import normalize_path, relpath
from context_tree.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    import structlog

    from context_tree.file_manipulation import StrPath


class PatternSource(BaseModel):
    """A raw ignore pattern together with the directory it applies to."""

    model_config = ConfigDict(frozen=True)

    pattern: str = Field(..., description="Raw pattern line")
    base_dir: str = Field(..., description="Absolute directory the pattern is relative to")


class CompiledRule(BaseModel):
    """An ignore pattern compiled to a regular expression.

    Attributes:
        pattern: The raw pattern as declared, including any `!` or trailing `/`.
        base_dir: Absolute directory the rule is scoped to.
        negated: Whether the pattern started with `!`.
        directory_only: Whether the pattern ended with `/`.
        anchored: Whether the pattern only matches from the start of `base_dir`.
        regex: The compiled expression, applied to `/`-separated paths relative to `base_dir`.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    pattern: str
    base_dir: str
    negated: bool = False
    directory_only: bool = False
    anchored: bool = False
    regex: re.Pattern[str]

    def matches(self, path: StrPath, is_dir: bool | None = None) -> bool:
        """Check whether this rule matches `path`.

        Args:
            path: the path to test; made absolute before matching
            is_dir: whether `path` is a directory, checked on disk when None
                and the rule needs to know

        Returns:
            bool: True if the rule matches, False otherwise or when `path` is not
                under the rule's base directory
        """
        rel = relpath(path, self.base_dir)
        if rel is None:
            return False
        m = self.regex.search(rel)
        if m is None:
            return False
        if not self.directory_only or m.group("tail"):
            return True
        if is_dir is None:
            is_dir = os.path.isdir(normalize_path(path))
        return is_dir


def pattern_to_regex(pattern: str, *, anchored: bool) -> str:
    """Translate a glob pattern (without `!`, trailing `/` or leading `/`) to a regex.

    `**/` matches zero or more leading directories, a bare `**` behaves like
    `*`, `*` matches within one path segment and `?` matches a single
    character other than `/`. Everything else is literal.

    Args:
        pattern: the glob pattern
        anchored: whether the pattern must match from the start of the path

    Returns:
        str: the regular expression source
    """
    out: list[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        if pattern.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            out.append("[^/]*")
            i += 2
        elif pattern[i] == "*":
            out.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            out.append("[^/]")
            i += 1
        else:
            out.append(re.escape(pattern[i]))
            i += 1
    body = "".join(out)
    prefix = "^" if anchored else "(?:^|/)"
    return f"{prefix}{body}(?P<tail>/.*)?$"


def compile_pattern(
    pattern: str,
    base_dir: StrPath,
    logger: structlog.BoundLogger | None = None,
) -> CompiledRule | None:
    """Compile one gitignore-style pattern scoped to `base_dir`.

    Args:
        pattern: the raw pattern line
        base_dir: the directory the pattern is relative to
        logger: logger for invalid patterns; the package logger when None

    Returns:
        CompiledRule | None: the compiled rule, or None for blank lines,
            comments and patterns that do not compile
    """
    raw = pattern.strip()
    if not raw or raw.startswith("#"):
        return None

    body = raw
    negated = body.startswith("!")
    if negated:
        body = body[1:]
    directory_only = body.endswith("/")
    if directory_only:
        body = body.rstrip("/")
    anchored = "/" in body
    if body.startswith("/"):
        body = body.lstrip("/")
    if not body:
        return None

    try:
        regex = re.compile(pattern_to_regex(body, anchored=anchored))
    except re.error as e:
        (logger or get_logger()).warning("Invalid ignore pattern %r: %s", raw, e)
        return None

    return CompiledRule(
        pattern=raw,
        base_dir=normalize_path(base_dir),
        negated=negated,
        directory_only=directory_only,
        anchored=anchored,
        regex=regex,
    )


class RuleSet(BaseModel):
    """An ordered, immutable collection of compiled rules.

    Declaration order only matters when at least one rule is negated.
    """

    model_config = ConfigDict(frozen=True)

    rules: tuple[CompiledRule, ...] = ()

    @computed_field
    @cached_property
    def has_negation(self) -> bool:
        """Whether any rule is a `!` negation."""
        return any(rule.negated for rule in self.rules)

    @classmethod
    def from_sources(
        cls,
        sources: Iterable[PatternSource],
        logger: structlog.BoundLogger | None = None,
    ) -> RuleSet:
        """Compile pattern sources in order, dropping the ones that do not compile."""
        rules: list[CompiledRule] = []
        for source in sources:
            rule = compile_pattern(source.pattern, source.base_dir, logger=logger)
            if rule is not None:
                rules.append(rule)
        return cls(rules=tuple(rules))

    def evaluate(self, path: StrPath, is_dir: bool | None = None) -> bool:
        """Decide whether `path` is ignored.

        Without negations any matching rule ignores the path. With negations
        the rules are scanned from last to first and the first match decides.

        Args:
            path: the path to test
            is_dir: whether `path` is a directory, if the caller already knows

        Returns:
            bool: True if the path is ignored
        """
        if not self.has_negation:
            return any(rule.matches(path, is_dir) for rule in self.rules)
        for rule in reversed(self.rules):
            if rule.matches(path, is_dir):
                return not rule.negated
        return False
