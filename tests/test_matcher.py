"""Tests for core.locator.matcher: rule compilation, matching, auto-detection."""

from __future__ import annotations

import re

import pytest

from models.schemas import RedactionRule
from core.locator.matcher import (
    PatternMatcher,
    RuleConfigurationError,
    build_regex_flags,
    compile_rules,
    should_use_fragment_aware,
)


def _texts(matcher: PatternMatcher, text: str) -> list[str]:
    return [m.text for m in matcher.find_matches(text)]


# ---------------------------------------------------------------------------
# Literal rules
# ---------------------------------------------------------------------------

class TestLiteralMatching:
    def test_offsets(self):
        matches = PatternMatcher(RedactionRule(pattern="cd")).find_matches("ab cd ef cd ")
        assert [(m.start, m.end) for m in matches] == [(3, 5), (9, 11)]

    def test_metacharacters_are_literal(self):
        matcher = PatternMatcher(RedactionRule(pattern="a.b"))
        assert _texts(matcher, "axb a.b") == ["a.b"]

    def test_case_sensitive_by_default(self):
        matcher = PatternMatcher(RedactionRule(pattern="Secret"))
        assert _texts(matcher, "secret SECRET Secret") == ["Secret"]

    def test_case_insensitive(self):
        matcher = PatternMatcher(RedactionRule(pattern="Secret", case_sensitive=False))
        assert _texts(matcher, "secret SECRET") == ["secret", "SECRET"]

    def test_non_overlapping(self):
        matcher = PatternMatcher(RedactionRule(pattern="aa"))
        assert _texts(matcher, "aaaa") == ["aa", "aa"]

    def test_no_match_is_not_an_error(self):
        assert PatternMatcher(RedactionRule(pattern="zzz")).find_matches("abc ") == []


# ---------------------------------------------------------------------------
# Regex rules
# ---------------------------------------------------------------------------

class TestRegexMatching:
    def test_document_order(self):
        matcher = PatternMatcher(RedactionRule(pattern=r"\d{3}-\d{2}-\d{4}", is_regex=True))
        assert _texts(matcher, "a 123-45-6789 b 987-65-4321 ") == ["123-45-6789", "987-65-4321"]

    def test_empty_matches_skipped(self):
        matcher = PatternMatcher(RedactionRule(pattern=r"\d*", is_regex=True))
        assert _texts(matcher, "ab 12 ") == ["12"]

    def test_case_insensitive(self):
        matcher = PatternMatcher(RedactionRule(pattern="acct", is_regex=True, case_sensitive=False))
        assert _texts(matcher, "ACCT ") == ["ACCT"]

    def test_explicit_flags_override_case(self):
        rule = RedactionRule(pattern="acct", is_regex=True, case_sensitive=False, regex_flags=[])
        assert _texts(PatternMatcher(rule), "ACCT acct ") == ["acct"]

        rule = RedactionRule(pattern="acct", is_regex=True, regex_flags=["ignorecase"])
        assert _texts(PatternMatcher(rule), "ACCT ") == ["ACCT"]

    def test_build_regex_flags_combines(self):
        rule = RedactionRule(pattern="x", is_regex=True, regex_flags=["IGNORECASE", "MULTILINE"])
        assert build_regex_flags(rule) == re.IGNORECASE | re.MULTILINE


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------

class TestRuleConfigurationErrors:
    def test_is_value_error(self):
        assert issubclass(RuleConfigurationError, ValueError)

    def test_invalid_regex(self):
        with pytest.raises(RuleConfigurationError) as exc_info:
            PatternMatcher(RedactionRule(pattern="(unclosed", is_regex=True))
        assert exc_info.value.patterns == ["(unclosed"]
        assert "(unclosed" in str(exc_info.value)

    def test_unbalanced_literal_is_fine(self):
        matcher = PatternMatcher(RedactionRule(pattern="(unclosed"))
        assert _texts(matcher, "x (unclosed ") == ["(unclosed"]

    def test_empty_pattern(self):
        with pytest.raises(RuleConfigurationError):
            PatternMatcher(RedactionRule(pattern=""))

    def test_unknown_flag(self):
        with pytest.raises(RuleConfigurationError, match="BOGUS"):
            PatternMatcher(RedactionRule(pattern="x", is_regex=True, regex_flags=["BOGUS"]))

    def test_compile_rules_reports_every_bad_rule(self):
        rules = [
            RedactionRule(pattern="ok"),
            RedactionRule(pattern="[", is_regex=True),
            RedactionRule(pattern="(", is_regex=True),
        ]
        with pytest.raises(RuleConfigurationError) as exc_info:
            compile_rules(rules)
        assert exc_info.value.patterns == ["[", "("]

    def test_compile_rules_keeps_order(self):
        rules = [RedactionRule(pattern="b"), RedactionRule(pattern="a")]
        assert [m.pattern for m in compile_rules(rules)] == ["b", "a"]


# ---------------------------------------------------------------------------
# Fragment-aware auto-detection
# ---------------------------------------------------------------------------

class TestShouldUseFragmentAware:
    @pytest.mark.parametrize("pattern", ["123", "1234", "123456789", "123-45-6789", "12/34/5678", "12 34 56"])
    def test_numeric_literals_enable(self, pattern):
        assert should_use_fragment_aware(RedactionRule(pattern=pattern)) is True

    @pytest.mark.parametrize("pattern", ["12", "1234567890", "ABC123", "Invoice", "12.34", "---"])
    def test_other_literals_do_not(self, pattern):
        assert should_use_fragment_aware(RedactionRule(pattern=pattern)) is False

    @pytest.mark.parametrize("pattern", [
        r"\d{3}-\d{2}-\d{4}",
        r"[0-9]{3}[0-9]{4}",
        r"\d{3}\s\d{4}",
        r"\d{3}\.\d{4}",
        r"(?P<area>\d{3})-(?:\d{2,3})",
    ])
    def test_segmented_numeric_regex_enables(self, pattern):
        assert should_use_fragment_aware(RedactionRule(pattern=pattern, is_regex=True)) is True

    @pytest.mark.parametrize("pattern", [
        r"\d{4}",
        r"\d+",
        r"\d{5}-\d{5}",
        r"[A-Z]\d{3}-\d{4}",
        r"acct\d{3}-\d{4}",
        r"\w{3}-\d{4}",
        r"\d{3}.\d{4}",
        r"\d{3}[^-]\d{4}",
        r"\d{3}\D\d{4}",
    ])
    def test_other_regex_do_not(self, pattern):
        assert should_use_fragment_aware(RedactionRule(pattern=pattern, is_regex=True)) is False

    def test_explicit_flag_wins(self):
        assert should_use_fragment_aware(RedactionRule(pattern="Invoice", fragment_aware=True)) is True
        assert should_use_fragment_aware(RedactionRule(pattern="1234", fragment_aware=False)) is False

    def test_matcher_exposes_decision(self):
        assert PatternMatcher(RedactionRule(pattern="1234")).fragment_aware is True
        assert PatternMatcher(RedactionRule(pattern=r"\d{4}", is_regex=True)).fragment_aware is False


# ---------------------------------------------------------------------------
# Rule input (camelCase aliases)
# ---------------------------------------------------------------------------

class TestRedactionRuleInput:
    def test_camel_case_fields(self):
        rule = RedactionRule.model_validate({
            "pattern": r"\d{4}",
            "isRegex": True,
            "caseSensitive": False,
            "fragmentAware": True,
            "regexFlags": ["MULTILINE"],
        })
        assert rule.is_regex is True
        assert rule.case_sensitive is False
        assert rule.fragment_aware is True
        assert rule.regex_flags == ["MULTILINE"]

    def test_defaults(self):
        rule = RedactionRule(pattern="x")
        assert rule.case_sensitive is True
        assert rule.fragment_aware is None
        assert rule.regex_flags is None
