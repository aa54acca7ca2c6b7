"""Rule matching against a page's search text.

Each :class:`RedactionRule` is compiled once into a :class:`PatternMatcher`
before any page is processed, so a malformed pattern is reported up front
instead of once per page.
"""

from __future__ import annotations

import logging
import re
from functools import reduce
from typing import Sequence

from core.locator.locator_config import (
    AUTO_FRAGMENT_LITERAL_SEPARATORS,
    AUTO_FRAGMENT_MAX_DIGITS,
    AUTO_FRAGMENT_MIN_DIGITS,
)
from models.schemas import RedactionRule, TextMatch

logger = logging.getLogger(__name__)


class RuleConfigurationError(ValueError):
    """A rule cannot be compiled (bad regex, empty pattern, unknown flag)."""

    def __init__(self, message: str, patterns: Sequence[str] = ()):
        super().__init__(message)
        self.patterns = list(patterns)


# ---------------------------------------------------------------------------
# Fragment-aware auto-detection
# ---------------------------------------------------------------------------

# \d{3}, \d{2,4}, [0-9]{4}
_DIGIT_QUANTIFIER_RE = re.compile(r"(?:\\d|\[0-9\])\{(\d+)(?:,\d*)?\}")
# (?:  (?P<name>  (?<name>  (?=  (?!  (?<=  (?<!
_GROUP_PREFIX_RE = re.compile(r"\(\?(?:P?<\w+>|[:=!]|<[=!])")
_ESCAPE_RE = re.compile(r"\\(.)")
# Escapes that never match letters
_NUMERIC_ESCAPES = frozenset("dsb")


def _literal_looks_numeric(pattern: str) -> bool:
    """Digits plus ``- / space`` separators only, with 3..9 digits."""
    if not all(c.isdecimal() or c in AUTO_FRAGMENT_LITERAL_SEPARATORS for c in pattern):
        return False
    digits = sum(1 for c in pattern if c.isdecimal())
    return AUTO_FRAGMENT_MIN_DIGITS <= digits <= AUTO_FRAGMENT_MAX_DIGITS


def _regex_looks_segmented_numeric(pattern: str) -> bool:
    """Recognize bounded, segmented digit formats such as ``\\d{3}-\\d{2}-\\d{4}``.

    Requires at least two bounded digit quantifiers whose minimum counts add
    up to 3..9 digits, and nothing in the pattern that can match a letter
    (letters, letter escapes other than ``\\d``/``\\s``/``\\b``, ``.``, negated classes).
    A lone quantifier (``\\d{4}``) does not qualify.
    """
    minimums = [int(m) for m in _DIGIT_QUANTIFIER_RE.findall(pattern)]
    if len(minimums) < 2:
        return False

    stripped = _GROUP_PREFIX_RE.sub("", pattern)
    for escaped in _ESCAPE_RE.findall(stripped):
        if escaped.isalpha() and escaped not in _NUMERIC_ESCAPES:
            return False
    stripped = _ESCAPE_RE.sub("", stripped)
    if any(c.isalpha() for c in stripped) or "." in stripped or "[^" in stripped:
        return False

    return AUTO_FRAGMENT_MIN_DIGITS <= sum(minimums) <= AUTO_FRAGMENT_MAX_DIGITS


def should_use_fragment_aware(rule: RedactionRule) -> bool:
    """Decide whether *rule* also runs through the fragment-aware pass."""
    if rule.fragment_aware is not None:
        return rule.fragment_aware
    if rule.is_regex:
        return _regex_looks_segmented_numeric(rule.pattern)
    return _literal_looks_numeric(rule.pattern)


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------

def build_regex_flags(rule: RedactionRule) -> re.RegexFlag:
    """Flags for *rule*: explicit ``regex_flags`` win over case sensitivity."""
    if rule.regex_flags is not None:
        try:
            members = [re.RegexFlag[name.strip().upper()] for name in rule.regex_flags]
        except KeyError as exc:
            raise RuleConfigurationError(
                f"Unknown regex flag {exc.args[0]!r} in rule {rule.pattern!r}",
                patterns=[rule.pattern],
            ) from exc
        return reduce(lambda a, b: a | b, members, re.RegexFlag(0))

    if not rule.case_sensitive:
        return re.IGNORECASE
    return re.RegexFlag(0)


class PatternMatcher:
    """A compiled rule."""

    def __init__(self, rule: RedactionRule):
        if not rule.pattern:
            raise RuleConfigurationError("Rule pattern cannot be empty", patterns=[rule.pattern])

        self.rule = rule
        self.fragment_aware = should_use_fragment_aware(rule)

        if rule.is_regex:
            flags = build_regex_flags(rule)
            source = rule.pattern
        else:
            # Literal search: escaped pattern, case folding only
            flags = re.RegexFlag(0) if rule.case_sensitive else re.IGNORECASE
            source = re.escape(rule.pattern)

        try:
            self._regex = re.compile(source, flags)
        except re.error as exc:
            raise RuleConfigurationError(
                f"Invalid regular expression {rule.pattern!r}: {exc}",
                patterns=[rule.pattern],
            ) from exc

    @property
    def pattern(self) -> str:
        return self.rule.pattern

    def find_matches(self, text: str) -> list[TextMatch]:
        """Every non-overlapping match in *text*, left to right."""
        matches: list[TextMatch] = []
        for m in self._regex.finditer(text):
            if m.end() == m.start():
                continue
            matches.append(TextMatch(start=m.start(), end=m.end(), text=m.group(0)))
        return matches


def compile_rules(rules: Sequence[RedactionRule]) -> list[PatternMatcher]:
    """Compile all rules, reporting every offending one in a single error."""
    matchers: list[PatternMatcher] = []
    errors: list[RuleConfigurationError] = []

    for rule in rules:
        try:
            matchers.append(PatternMatcher(rule))
        except RuleConfigurationError as exc:
            errors.append(exc)

    if errors:
        if len(errors) == 1:
            raise errors[0]
        raise RuleConfigurationError(
            "; ".join(str(e) for e in errors),
            patterns=[p for e in errors for p in e.patterns],
        )

    for m in matchers:
        logger.debug(
            "Compiled rule %r (regex=%s, fragment_aware=%s)",
            m.pattern, m.rule.is_regex, m.fragment_aware,
        )
    return matchers
