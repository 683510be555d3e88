"""
Result Accumulator for HypoStream
Collects findings from progress messages and builds the final validation result
"""

import logging
from typing import Any, Optional

from hypostream.parsers.message_parser import parse_message
from hypostream.validators.normalizer import (
    NO_CONCLUSION,
    coerce_float,
    extract_payload,
    normalize_evidence,
    normalize_figures,
    normalize_methods,
    normalize_sources,
)
from hypostream.validators.result import (
    StatisticalFinding,
    ValidationRequest,
    ValidationResult,
    utc_timestamp,
)

logger = logging.getLogger(__name__)


class ResultAccumulator:
    """
    Running fold over the messages of one validation session.

    Findings are appended in arrival order and never deduplicated. The final
    result is built at most once; later calls to finalize() return it unchanged.
    """

    def __init__(self, request: ValidationRequest):
        self.request = request
        self.findings: list[StatisticalFinding] = []
        self.raw_output: list[str] = []
        self.result: Optional[ValidationResult] = None

    @property
    def finalized(self) -> bool:
        return self.result is not None

    def add_message(self, message: Optional[str]) -> list[StatisticalFinding]:
        """
        Record a progress message and parse it for findings.

        Args:
            message: Message text from a stream event (may be empty)

        Returns:
            Findings extracted from this message
        """
        if self.finalized or not message:
            return []

        self.raw_output.append(message)
        new_findings = parse_message(message)
        if new_findings:
            self.findings.extend(new_findings)
            logger.debug(
                f"Parsed {len(new_findings)} finding(s): "
                f"{', '.join(f.test_name for f in new_findings)}"
            )
        return new_findings

    def finalize(self, payload: Optional[dict[str, Any]]) -> ValidationResult:
        """
        Build the final result from the terminal payload and accumulated findings.

        Args:
            payload: The ``result`` object of the completed event

        Returns:
            The ValidationResult for this session
        """
        if self.result is not None:
            logger.debug("Result already built; ignoring repeated terminal payload")
            return self.result

        data = extract_payload(payload)
        if not data:
            logger.warning("Completed event carried no result payload; using defaults")

        score = min(1.0, max(0.0, coerce_float(data.get("validation_score"), 0.0)))
        p_value = max(0.0, coerce_float(data.get("p_value"), 0.0))
        conclusion = data.get("conclusion") or NO_CONCLUSION

        methods = normalize_methods(data.get("methods")) + tuple(
            f.to_method() for f in self.findings
        )

        self.result = ValidationResult(
            hypothesis=self.request.hypothesis,
            validation_score=score,
            p_value=p_value,
            supporting_evidence=normalize_evidence(data.get("supporting_evidence")),
            contradicting_evidence=normalize_evidence(data.get("contradicting_evidence")),
            methods=methods,
            sources=normalize_sources(data.get("sources")),
            figures=normalize_figures(data.get("figures")),
            conclusion=str(conclusion),
            timestamp=utc_timestamp(),
            is_simulated=False,
            alpha=self.request.alpha,
        )
        logger.info(
            f"Validation result built: score={score:.3f}, p={p_value:.3g}, "
            f"{len(methods)} method(s)"
        )
        return self.result
