"""
Payload Normalizer for HypoStream
Shapes the raw terminal payload from the validation service into result records
"""

import logging
import math
from typing import Any

from hypostream.validators.result import (
    FIGURE_CHART,
    STRENGTH_MODERATE,
    VALID_FIGURE_TYPES,
    VALID_STRENGTHS,
    Evidence,
    Figure,
    Method,
    Source,
)

logger = logging.getLogger(__name__)

NO_DESCRIPTION = "No description available"
NO_CONCLUSION = "No conclusion available"


def extract_payload(result: Any) -> dict[str, Any]:
    """
    Locate the parsed result inside a terminal payload.

    The service wraps its findings in a ``parsed_result`` object; older
    responses put the fields at the top level.
    """
    if not isinstance(result, dict):
        return {}
    parsed = result.get("parsed_result")
    if isinstance(parsed, dict):
        return parsed
    return result


def coerce_float(value: Any, default: float) -> float:
    """Convert a payload number, falling back to default on junk."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring non-numeric payload value: {value!r}")
        return default
    if not math.isfinite(number):
        logger.warning(f"Ignoring non-finite payload value: {value!r}")
        return default
    return number


def _items(value: Any, label: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        logger.warning(f"Expected a list for {label}, got {type(value).__name__}")
        return []
    return value


def normalize_evidence(items: Any) -> tuple[Evidence, ...]:
    """Normalize an evidence array, filling in missing fields."""
    evidence = []
    for item in _items(items, "evidence"):
        if isinstance(item, str):
            item = {"description": item}
        elif not isinstance(item, dict):
            continue

        strength = str(item.get("strength") or STRENGTH_MODERATE).lower()
        if strength not in VALID_STRENGTHS:
            strength = STRENGTH_MODERATE

        evidence.append(
            Evidence(
                source=str(item.get("source") or "Unknown source"),
                description=str(item.get("description") or item.get("text") or NO_DESCRIPTION),
                strength=strength,
            )
        )
    return tuple(evidence)


def normalize_methods(items: Any) -> tuple[Method, ...]:
    """Normalize a methods array from the payload."""
    methods = []
    for item in _items(items, "methods"):
        if isinstance(item, str):
            item = {"name": item}
        elif not isinstance(item, dict):
            continue

        parameters = item.get("parameters")
        methods.append(
            Method(
                name=str(item.get("name") or "Unnamed method"),
                description=str(item.get("description") or NO_DESCRIPTION),
                parameters=dict(parameters) if isinstance(parameters, dict) else {},
            )
        )
    return tuple(methods)


def normalize_sources(items: Any) -> tuple[Source, ...]:
    """Normalize a sources array from the payload."""
    sources = []
    for item in _items(items, "sources"):
        if not isinstance(item, dict):
            continue

        authors = item.get("authors")
        if isinstance(authors, list):
            authors = tuple(str(a) for a in authors)
        else:
            authors = (str(item.get("author") or "Unknown author"),)

        year = item.get("year")
        if not isinstance(year, (int, float)) or isinstance(year, bool) or not math.isfinite(year):
            year = None
        sources.append(
            Source(
                title=str(item.get("title") or "Untitled source"),
                authors=authors,
                year=int(year) if year is not None else None,
                journal=item.get("journal") or item.get("publication"),
                doi=item.get("doi"),
                url=item.get("url"),
            )
        )
    return tuple(sources)


def normalize_figures(items: Any) -> tuple[Figure, ...]:
    """Normalize a figures array from the payload."""
    figures = []
    for item in _items(items, "figures"):
        if not isinstance(item, dict):
            continue

        figure_type = item.get("type") or FIGURE_CHART
        if figure_type not in VALID_FIGURE_TYPES:
            figure_type = FIGURE_CHART

        figures.append(
            Figure(
                title=str(item.get("title") or "Untitled figure"),
                description=str(item.get("description") or item.get("caption") or NO_DESCRIPTION),
                type=figure_type,
                image_data=item.get("image_data"),
            )
        )
    return tuple(figures)
