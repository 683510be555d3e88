"""
Validation Result for HypoStream
Data structures for hypothesis validation outcomes
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional


# Evidence strength constants
STRENGTH_STRONG = "strong"
STRENGTH_MODERATE = "moderate"
STRENGTH_WEAK = "weak"

VALID_STRENGTHS = {STRENGTH_STRONG, STRENGTH_MODERATE, STRENGTH_WEAK}


# Figure types
FIGURE_CHART = "chart"
FIGURE_TABLE = "table"
FIGURE_IMAGE = "image"

VALID_FIGURE_TYPES = {FIGURE_CHART, FIGURE_TABLE, FIGURE_IMAGE}


def utc_timestamp() -> str:
    """Current time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class ValidationRequest:
    """A single hypothesis submitted for validation."""

    hypothesis: str
    alpha: float = 0.05

    def __post_init__(self):
        if not isinstance(self.hypothesis, str) or not self.hypothesis.strip():
            raise ValueError("Hypothesis must not be empty")
        if not 0 < self.alpha <= 1:
            raise ValueError(f"Invalid alpha {self.alpha}. Must be in (0, 1]")


@dataclass(frozen=True)
class Method:
    """
    One entry of a result's methods list.

    Attributes:
        name: Method or statistical test name
        description: Human-readable description
        parameters: Numeric outputs of the method (statistic, p_value)
    """

    name: str
    description: str
    parameters: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": dict(self.parameters),
        }


@dataclass(frozen=True)
class StatisticalFinding:
    """
    A statistical test result recognized in a progress message.

    Attributes:
        test_name: Canonical name of the test (e.g. "Bootstrap Test")
        statistic: Test statistic, None when the line reports only a p-value
        p_value: Reported p-value
        description: Short description of the test
        raw_text: The matched text the finding was extracted from
    """

    test_name: str
    statistic: Optional[float]
    p_value: float
    description: str
    raw_text: str

    def to_method(self) -> Method:
        """Render the finding as a methods entry."""
        parameters: dict[str, Any] = {}
        if self.statistic is not None:
            parameters["statistic"] = self.statistic
        parameters["p_value"] = self.p_value
        return Method(name=self.test_name, description=self.description, parameters=parameters)

    def to_dict(self) -> dict[str, Any]:
        return {
            "test_name": self.test_name,
            "statistic": self.statistic,
            "p_value": self.p_value,
            "description": self.description,
            "raw_text": self.raw_text,
        }


@dataclass(frozen=True)
class Evidence:
    """A piece of supporting or contradicting evidence."""

    source: str
    description: str
    strength: str = STRENGTH_MODERATE

    def __post_init__(self):
        if self.strength not in VALID_STRENGTHS:
            raise ValueError(
                f"Invalid strength '{self.strength}'. Must be one of: {VALID_STRENGTHS}"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "description": self.description,
            "strength": self.strength,
        }


@dataclass(frozen=True)
class Source:
    """A bibliographic source cited by the validation."""

    title: str
    authors: tuple[str, ...] = ()
    year: Optional[int] = None
    journal: Optional[str] = None
    doi: Optional[str] = None
    url: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "authors": list(self.authors),
            "year": self.year,
            "journal": self.journal,
            "doi": self.doi,
            "url": self.url,
        }


@dataclass(frozen=True)
class Figure:
    """A figure attached to the validation report."""

    title: str
    description: str
    type: str = FIGURE_CHART
    image_data: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "type": self.type,
            "image_data": self.image_data,
        }


@dataclass(frozen=True)
class ValidationResult:
    """
    Represents the final result of a hypothesis validation job.

    Attributes:
        hypothesis: The validated hypothesis text
        validation_score: Overall support for the hypothesis in [0, 1]
        p_value: Aggregate p-value (>= 0)
        supporting_evidence: Evidence in favour of the hypothesis
        contradicting_evidence: Evidence against the hypothesis
        methods: Methods and statistical tests behind the score
        sources: Cited sources
        conclusion: Human-readable conclusion
        timestamp: ISO-8601 construction time
        is_simulated: True when produced locally instead of by the service
        figures: Optional figures from the service
        alpha: Significance level the validation was requested with
    """

    hypothesis: str
    validation_score: float
    p_value: float
    supporting_evidence: tuple[Evidence, ...] = ()
    contradicting_evidence: tuple[Evidence, ...] = ()
    methods: tuple[Method, ...] = ()
    sources: tuple[Source, ...] = ()
    conclusion: str = "No conclusion available"
    timestamp: str = field(default_factory=utc_timestamp)
    is_simulated: bool = False
    figures: tuple[Figure, ...] = ()
    alpha: Optional[float] = None

    def __post_init__(self):
        """Validate score ranges after initialization."""
        if not 0 <= self.validation_score <= 1:
            raise ValueError(f"Invalid validation_score {self.validation_score}. Must be in [0, 1]")
        if self.p_value < 0:
            raise ValueError(f"Invalid p_value {self.p_value}. Must be >= 0")

    def is_significant(self) -> bool:
        """Check if the aggregate p-value is below the requested alpha."""
        if self.alpha is None:
            return False
        return self.p_value < self.alpha

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "hypothesis": self.hypothesis,
            "validation_score": self.validation_score,
            "p_value": self.p_value,
            "supporting_evidence": [e.to_dict() for e in self.supporting_evidence],
            "contradicting_evidence": [e.to_dict() for e in self.contradicting_evidence],
            "methods": [m.to_dict() for m in self.methods],
            "sources": [s.to_dict() for s in self.sources],
            "figures": [f.to_dict() for f in self.figures],
            "conclusion": self.conclusion,
            "timestamp": self.timestamp,
            "is_simulated": self.is_simulated,
            "alpha": self.alpha,
        }

    def to_json(self, indent: Optional[int] = None) -> str:
        """Serialize to JSON with stable key order."""
        return json.dumps(self.to_dict(), sort_keys=True, indent=indent)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ValidationResult":
        """Create ValidationResult from a dictionary produced by to_dict()."""
        return cls(
            hypothesis=data["hypothesis"],
            validation_score=data.get("validation_score", 0.0),
            p_value=data.get("p_value", 0.0),
            supporting_evidence=tuple(
                Evidence(**item) for item in data.get("supporting_evidence", [])
            ),
            contradicting_evidence=tuple(
                Evidence(**item) for item in data.get("contradicting_evidence", [])
            ),
            methods=tuple(
                Method(
                    name=item["name"],
                    description=item["description"],
                    parameters=item.get("parameters", {}),
                )
                for item in data.get("methods", [])
            ),
            sources=tuple(
                Source(
                    title=item["title"],
                    authors=tuple(item.get("authors", [])),
                    year=item.get("year"),
                    journal=item.get("journal"),
                    doi=item.get("doi"),
                    url=item.get("url"),
                )
                for item in data.get("sources", [])
            ),
            figures=tuple(Figure(**item) for item in data.get("figures", [])),
            conclusion=data.get("conclusion", "No conclusion available"),
            timestamp=data.get("timestamp") or utc_timestamp(),
            is_simulated=data.get("is_simulated", False),
            alpha=data.get("alpha"),
        )
