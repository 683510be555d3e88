"""
Parsers for HypoStream
Statistical finding extraction from progress messages
"""

from hypostream.parsers.message_parser import (
    RULES,
    PatternRule,
    format_finding_line,
    parse_line,
    parse_message,
)

__all__ = ["RULES", "PatternRule", "format_finding_line", "parse_line", "parse_message"]
