"""
Message Parser for HypoStream
Extracts statistical test findings from free-text validation progress messages
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional

from hypostream.validators.result import StatisticalFinding

logger = logging.getLogger(__name__)

# Unsigned decimal or exponential number, e.g. 0.497, .5, 3.05462e-171
NUMBER = r"(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?"
SIGNED_NUMBER = r"[-+]?" + NUMBER

BOOTSTRAP_TEST = "Bootstrap Test"
FISHER_METHOD = "Fisher's Method"
KS_TANGENTIAL = "Kolmogorov-Smirnov (Tangential Motion)"
KS_PERPENDICULAR = "Kolmogorov-Smirnov (Perpendicular Motion)"
TANGENTIAL_RADIAL_RATIO = "Tangential/Radial Ratio"
KS_COMBINED = "Combined Kolmogorov-Smirnov Test"

DESCRIPTIONS = {
    BOOTSTRAP_TEST: "Bootstrap resampling test",
    FISHER_METHOD: "Combined p-value using Fisher's method",
    KS_TANGENTIAL: "K-S test for tangential motion distribution",
    KS_PERPENDICULAR: "K-S test for perpendicular motion distribution",
    TANGENTIAL_RADIAL_RATIO: "Statistical test for tangential to radial motion ratio",
    KS_COMBINED: "Combined p-value from multiple K-S tests",
}


@dataclass(frozen=True)
class PatternRule:
    """
    One entry of the parsing grammar.

    Attributes:
        test_name: Name given to findings produced by this rule
        pattern: Compiled regex used as the line predicate
        extract: Builds a finding from a successful match
    """

    test_name: str
    pattern: re.Pattern
    extract: Callable[[str, re.Match], StatisticalFinding]

    def apply(self, line: str) -> Optional[StatisticalFinding]:
        match = self.pattern.search(line)
        if match is None:
            return None
        return self.extract(self.test_name, match)


def _p_value_only(test_name: str, match: re.Match) -> StatisticalFinding:
    return StatisticalFinding(
        test_name=test_name,
        statistic=None,
        p_value=float(match.group("p")),
        description=DESCRIPTIONS[test_name],
        raw_text=match.group(0),
    )


def _statistic_and_p_value(test_name: str, match: re.Match) -> StatisticalFinding:
    return StatisticalFinding(
        test_name=test_name,
        statistic=float(match.group("stat")),
        p_value=float(match.group("p")),
        description=DESCRIPTIONS[test_name],
        raw_text=match.group(0),
    )


def _p_value_pattern(label: str) -> re.Pattern:
    return re.compile(label + r"\s*:\s*(?P<p>" + NUMBER + ")", re.IGNORECASE)


def _statistic_pattern(label: str) -> re.Pattern:
    return re.compile(
        label
        + r"\s*:\s*statistic\s*=\s*(?P<stat>"
        + SIGNED_NUMBER
        + r")\s*,\s*p-value\s*=\s*(?P<p>"
        + NUMBER
        + ")",
        re.IGNORECASE,
    )


# Tried in order; the first matching rule wins for a line
RULES: tuple[PatternRule, ...] = (
    PatternRule(
        BOOTSTRAP_TEST,
        _p_value_pattern(r"Bootstrap\s+p-value"),
        _p_value_only,
    ),
    PatternRule(
        FISHER_METHOD,
        _p_value_pattern(r"Combined\s+p-value\s*\(\s*Fisher'?s\s+method\s*\)"),
        _p_value_only,
    ),
    PatternRule(
        KS_TANGENTIAL,
        _statistic_pattern(r"Tangential\s+motion\s*\(\s*pm_l\s*\)"),
        _statistic_and_p_value,
    ),
    PatternRule(
        KS_PERPENDICULAR,
        _statistic_pattern(r"Perpendicular\s+motion\s*\(\s*pm_b\s*\)"),
        _statistic_and_p_value,
    ),
    PatternRule(
        TANGENTIAL_RADIAL_RATIO,
        _statistic_pattern(r"Tangential\s*/\s*Radial\s+ratio"),
        _statistic_and_p_value,
    ),
    PatternRule(
        KS_COMBINED,
        _p_value_pattern(r"Combined\s+K-?S\s+test\s+p-value"),
        _p_value_only,
    ),
)

# Canonical line formats, as printed by the validation service
LINE_FORMATS = {
    BOOTSTRAP_TEST: "Bootstrap p-value: {p}",
    FISHER_METHOD: "Combined p-value (Fisher's method): {p}",
    KS_TANGENTIAL: "Tangential motion (pm_l): statistic={stat}, p-value={p}",
    KS_PERPENDICULAR: "Perpendicular motion (pm_b): statistic={stat}, p-value={p}",
    TANGENTIAL_RADIAL_RATIO: "Tangential/Radial ratio: statistic={stat}, p-value={p}",
    KS_COMBINED: "Combined KS test p-value: {p}",
}


def parse_line(line: str, rules: tuple[PatternRule, ...] = RULES) -> Optional[StatisticalFinding]:
    """
    Extract at most one finding from a single line of text.

    Args:
        line: One line of a progress message
        rules: Ordered rule table (defaults to RULES)

    Returns:
        The finding from the first matching rule, or None
    """
    if not line or not line.strip():
        return None
    for rule in rules:
        finding = rule.apply(line)
        if finding is not None:
            return finding
    return None


def parse_message(text: Optional[str], rules: tuple[PatternRule, ...] = RULES) -> list[StatisticalFinding]:
    """
    Extract findings from every line of a message, in line order.

    A line that matches nothing is skipped. A line whose extraction fails is
    logged and skipped without affecting the remaining lines.
    """
    if not text:
        return []

    findings = []
    for line in text.splitlines():
        try:
            finding = parse_line(line, rules)
        except Exception as e:
            logger.warning(f"Failed to parse line {line[:80]!r}: {e}")
            continue
        if finding is not None:
            findings.append(finding)
    return findings


def format_finding_line(finding: StatisticalFinding) -> str:
    """Render a finding back into the line format the service prints."""
    template = LINE_FORMATS.get(finding.test_name)
    if template is None:
        return finding.raw_text
    return template.format(stat=finding.statistic, p=finding.p_value)
