"""
Concierge engine command-line entry point.

Classifies a single utterance, or starts the offline console demo.

Usage:
    Classify:     python main.py classify "rose gold rings under $2,000"
    Console mode: python main.py console [--scenario shopping]
"""

import argparse
import json
import sys
from typing import Optional

from concierge.config import settings
from concierge.conversation.intent_rules import decide_intent


def _run_classify(text: str) -> None:
    """Print the classification of one utterance as JSON."""
    result = decide_intent(text)
    output = {
        "intent": result.intent.value,
        "confidence": result.confidence,
        "reason": result.reason,
        "filters": result.filters.to_payload() if result.filters else None,
        "payload": result.payload,
    }
    print(json.dumps(output, indent=2))


def _run_console_mode(scenario: Optional[str]) -> None:
    """Start the offline console demo (no storefront required)."""
    from console_demo import ConsoleSession

    session = ConsoleSession()
    if scenario:
        session.run_scenario(scenario)
    else:
        session.run()


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description=f"{settings.brand.name} concierge engine")
    commands = parser.add_subparsers(dest="command", required=True)

    classify = commands.add_parser("classify", help="Classify one guest message")
    classify.add_argument("text", help="The message to classify")

    console = commands.add_parser("console", help="Chat with the concierge in the terminal")
    console.add_argument("--scenario", default=None, help="Auto-play a pre-scripted scenario")

    args = parser.parse_args(argv)
    if args.command == "classify":
        _run_classify(args.text)
    else:
        _run_console_mode(args.scenario)
    return 0


if __name__ == "__main__":
    sys.exit(main())
