"""
Tests for the statistical finding Message Parser
"""

import pytest

from hypostream.parsers.message_parser import (
    BOOTSTRAP_TEST,
    FISHER_METHOD,
    KS_COMBINED,
    KS_PERPENDICULAR,
    KS_TANGENTIAL,
    RULES,
    TANGENTIAL_RADIAL_RATIO,
    PatternRule,
    format_finding_line,
    parse_line,
    parse_message,
)


class TestParseLine:
    """Tests for single-line extraction"""

    def test_bootstrap_line(self):
        """Test bootstrap p-value line yields a p-value-only finding"""
        finding = parse_line("Bootstrap p-value: 0.497")

        assert finding is not None
        assert finding.test_name == "Bootstrap Test"
        assert finding.p_value == 0.497
        assert finding.statistic is None
        assert finding.raw_text == "Bootstrap p-value: 0.497"

    def test_tangential_motion_exponential_p_value(self):
        """Test exponential notation is parsed exactly"""
        finding = parse_line("Tangential motion (pm_l): statistic=0.14753, p-value=3.05462e-171")

        assert finding is not None
        assert finding.test_name == "Kolmogorov-Smirnov (Tangential Motion)"
        assert finding.statistic == 0.14753
        assert finding.p_value == 3.05462e-171

    def test_fisher_method_line(self):
        """Test Fisher's method combined p-value"""
        finding = parse_line("Combined p-value (Fisher's method): 0.00947")

        assert finding.test_name == FISHER_METHOD
        assert finding.p_value == 0.00947
        assert finding.statistic is None

    def test_perpendicular_motion_line(self):
        """Test perpendicular motion K-S line"""
        finding = parse_line("Perpendicular motion (pm_b): statistic=0.13261, p-value=2.52084e-138")

        assert finding.test_name == KS_PERPENDICULAR
        assert finding.statistic == 0.13261
        assert finding.p_value == 2.52084e-138

    def test_tangential_radial_ratio_line(self):
        """Test tangential/radial ratio line is not mistaken for tangential motion"""
        finding = parse_line("Tangential/Radial ratio: statistic=0.13825, p-value=8.31306e-149")

        assert finding.test_name == TANGENTIAL_RADIAL_RATIO
        assert finding.statistic == 0.13825
        assert finding.p_value == 8.31306e-149

    def test_combined_ks_line(self):
        """Test combined K-S p-value line"""
        finding = parse_line("Combined KS test p-value: 1.2E-5")

        assert finding.test_name == KS_COMBINED
        assert finding.p_value == 1.2e-5
        assert finding.statistic is None

    def test_case_and_whitespace_tolerant(self):
        """Test matching ignores case and extra whitespace"""
        finding = parse_line("   BOOTSTRAP   p-value :   0.05  ")

        assert finding.test_name == BOOTSTRAP_TEST
        assert finding.p_value == 0.05

    def test_embedded_in_longer_line(self):
        """Test a finding is found inside a prefixed log line"""
        finding = parse_line("Observation: Bootstrap p-value: 0.3 (10000 resamples)")

        assert finding.test_name == BOOTSTRAP_TEST
        assert finding.p_value == 0.3

    @pytest.mark.parametrize(
        "line",
        [
            "",
            "   ",
            "Loading Gaia DR3 sample...",
            "Bootstrap p-value: n/a",
            "Tangential motion (pm_l): statistic=0.1",
            "Kolmogorov-Smirnov test results:",
        ],
    )
    def test_unmatched_lines_yield_nothing(self, line):
        """Test lines with no recognizable finding are skipped"""
        assert parse_line(line) is None

    def test_statistic_line_requires_both_values(self):
        """Test K-S rules need both the statistic and the p-value"""
        assert parse_line("Perpendicular motion (pm_b): p-value=0.01") is None

    def test_first_rule_wins(self):
        """Test a line matching several rules yields only the first rule's finding"""
        line = "Bootstrap p-value: 0.2; Combined KS test p-value: 0.01"

        finding = parse_line(line)

        assert finding.test_name == BOOTSTRAP_TEST
        assert len(parse_message(line)) == 1


class TestRuleTable:
    """Tests for the ordered rule table"""

    def test_rule_order(self):
        """Test the rule priority order"""
        assert [rule.test_name for rule in RULES] == [
            BOOTSTRAP_TEST,
            FISHER_METHOD,
            KS_TANGENTIAL,
            KS_PERPENDICULAR,
            TANGENTIAL_RADIAL_RATIO,
            KS_COMBINED,
        ]

    def test_test_names_are_distinct(self):
        """Test every rule produces a distinct test name"""
        names = [rule.test_name for rule in RULES]
        assert len(names) == len(set(names))

    def test_custom_rule_table(self):
        """Test parse_line accepts an alternative rule table"""
        only_combined = tuple(r for r in RULES if r.test_name == KS_COMBINED)

        assert parse_line("Bootstrap p-value: 0.4", rules=only_combined) is None
        assert parse_line("Combined KS test p-value: 0.4", rules=only_combined).p_value == 0.4


class TestParseMessage:
    """Tests for multi-line message parsing"""

    def test_multiline_message_in_order(self):
        """Test findings come back in line order"""
        message = (
            "Complete Kolmogorov-Smirnov test results:\n"
            "Tangential motion (pm_l): statistic=0.14753, p-value=3.05462e-171\n"
            "Perpendicular motion (pm_b): statistic=0.13261, p-value=2.52084e-138\n"
            "Combined p-value (Fisher's method): 0.00947"
        )

        findings = parse_message(message)

        assert [f.test_name for f in findings] == [KS_TANGENTIAL, KS_PERPENDICULAR, FISHER_METHOD]

    def test_duplicates_are_kept(self):
        """Test repeated test lines are not deduplicated"""
        message = "Bootstrap p-value: 0.4\nBootstrap p-value: 0.4"

        findings = parse_message(message)

        assert len(findings) == 2
        assert findings[0] == findings[1]

    def test_empty_message(self):
        """Test empty and None messages"""
        assert parse_message("") == []
        assert parse_message(None) == []

    def test_failing_line_is_isolated(self):
        """Test an extractor error on one line does not stop the others"""

        def explode(test_name, match):
            raise RuntimeError("boom")

        broken = PatternRule("Broken", RULES[0].pattern, explode)
        rules = (broken,) + RULES[1:]
        message = "Bootstrap p-value: 0.1\nCombined KS test p-value: 0.2"

        findings = parse_message(message, rules=rules)

        assert [f.test_name for f in findings] == [KS_COMBINED]


class TestFormatFindingLine:
    """Tests for rendering findings back into service lines"""

    @pytest.mark.parametrize(
        "line",
        [
            "Bootstrap p-value: 0.497",
            "Combined p-value (Fisher's method): 0.00947",
            "Tangential motion (pm_l): statistic=0.14753, p-value=3.05462e-171",
            "Perpendicular motion (pm_b): statistic=0.13261, p-value=2.52084e-138",
            "Tangential/Radial ratio: statistic=0.13825, p-value=8.31306e-149",
            "Combined KS test p-value: 0.0001",
        ],
    )
    def test_canonical_lines_render_unchanged(self, line):
        """Test canonical service lines survive parse and format"""
        assert format_finding_line(parse_line(line)) == line
