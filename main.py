#!/usr/bin/env python3
"""
HypoStream Main Entry Point
Validate a hypothesis against the streaming validation service from the command line
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from hypostream.config import StreamConfig
from hypostream.parsers.message_parser import format_finding_line
from hypostream.streaming.session import SessionUpdate
from hypostream.streaming.validator import StreamingValidator
from hypostream.validators.result import ValidationRequest, ValidationResult
from hypostream.validators.simulator import simulate_validation

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False, log_file: str | None = None):
    """Configure root logging for the CLI (stderr, so --json output stays parseable)"""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


class ProgressPrinter:
    """Prints each progress update and any findings it added"""

    def __init__(self):
        self.seen = 0

    def __call__(self, update: SessionUpdate):
        state = update.state
        print(f"[{state.progress:3d}%] {state.status.value:<13} {state.message}")
        if update.is_simulated:
            for finding in state.findings:
                print(f"        -> (simulated) {format_finding_line(finding)}")
            return
        for finding in state.findings[self.seen :]:
            print(f"        -> {format_finding_line(finding)}")
        self.seen = len(state.findings)


def save_result(result: ValidationResult, path: str | None):
    if not path:
        return
    Path(path).write_text(result.to_json(indent=2))
    logger.info(f"Saved result to {path}")


def print_result(result: ValidationResult, as_json: bool = False):
    if as_json:
        print(result.to_json(indent=2))
        return

    print("=" * 80)
    print(f"Hypothesis:        {result.hypothesis}")
    print(f"Validation score:  {result.validation_score:.2f}")
    print(f"p-value:           {result.p_value:.4g} (alpha={result.alpha})")
    print(f"Significant:       {'yes' if result.is_significant() else 'no'}")
    print(f"Simulated:         {'yes' if result.is_simulated else 'no'}")
    print(f"Conclusion:        {result.conclusion}")

    if result.supporting_evidence:
        print("Supporting evidence:")
        for evidence in result.supporting_evidence:
            print(f"  [{evidence.strength}] {evidence.description} ({evidence.source})")
    if result.contradicting_evidence:
        print("Contradicting evidence:")
        for evidence in result.contradicting_evidence:
            print(f"  [{evidence.strength}] {evidence.description} ({evidence.source})")
    if result.methods:
        print("Methods:")
        for method in result.methods:
            params = ", ".join(f"{k}={v}" for k, v in method.parameters.items())
            print(f"  {method.name}" + (f" ({params})" if params else ""))
    print("=" * 80)


async def run_validate(args) -> int:
    config = StreamConfig.from_env()
    if args.idle_timeout is not None:
        config.idle_timeout = args.idle_timeout if args.idle_timeout > 0 else None

    async with StreamingValidator(config=config) as validator:
        handle = validator.start(args.hypothesis, args.alpha)
        if handle is None:
            logger.error(f"Invalid request: {validator.error}")
            return 1

        if not args.json:
            handle.on_event(ProgressPrinter())

        result = await handle.wait()

        if validator.error:
            logger.error(f"Validation failed: {validator.error}")
            return 1

        if validator.is_simulated:
            logger.warning(f"Streaming unavailable, showing simulated result: {validator.fallback_reason}")

        if result is None:
            logger.error("Validation ended without a result")
            return 1

        save_result(result, args.output)
        print_result(result, as_json=args.json)
        return 0


def run_simulate(args) -> int:
    alpha = args.alpha if args.alpha is not None else StreamConfig.from_env().default_alpha
    try:
        request = ValidationRequest(args.hypothesis, alpha)
    except ValueError as e:
        logger.error(f"Invalid request: {e}")
        return 1

    result = simulate_validation(request.hypothesis, request.alpha)
    save_result(result, args.output)
    print_result(result, as_json=args.json)
    return 0


def run_show(args) -> int:
    try:
        result = ValidationResult.from_dict(json.loads(Path(args.path).read_text()))
    except (OSError, ValueError, KeyError, TypeError) as e:
        logger.error(f"Could not read result from {args.path}: {e}")
        return 1
    print_result(result, as_json=args.json)
    return 0


async def main() -> int:
    """Main entry point for HypoStream"""
    parser = argparse.ArgumentParser(description="HypoStream - Streaming Hypothesis Validation")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", default=None, help="Also write logs to this file")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    validate_parser = subparsers.add_parser("validate", help="Validate a hypothesis via the stream")
    validate_parser.add_argument("hypothesis", help="Hypothesis text")
    validate_parser.add_argument(
        "--alpha",
        type=float,
        default=None,
        help="Significance level (default: HYPOSTREAM_DEFAULT_ALPHA or 0.05)",
    )
    validate_parser.add_argument(
        "--idle-timeout",
        type=float,
        default=None,
        help="Seconds without events before falling back (0 disables)",
    )
    validate_parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    validate_parser.add_argument("--output", "-o", default=None, help="Also save the result as JSON")

    simulate_parser = subparsers.add_parser("simulate", help="Show the offline simulated result")
    simulate_parser.add_argument("hypothesis", help="Hypothesis text")
    simulate_parser.add_argument("--alpha", type=float, default=None, help="Significance level")
    simulate_parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    simulate_parser.add_argument("--output", "-o", default=None, help="Also save the result as JSON")

    show_parser = subparsers.add_parser("show", help="Print a result saved with --output")
    show_parser.add_argument("path", help="Path to a saved result JSON file")
    show_parser.add_argument("--json", action="store_true", help="Print the result as JSON")

    args = parser.parse_args()
    setup_logging(args.verbose, args.log_file)

    if args.command == "validate":
        return await run_validate(args)
    elif args.command == "simulate":
        return run_simulate(args)
    elif args.command == "show":
        return run_show(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        sys.exit(130)
