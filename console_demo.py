"""
Offline console demo: chat with the concierge without the storefront widget.

Runs the real classifier, scripts, and mock collaborators in the terminal.
Module messages (forms, carousels, the intent chooser) are printed as a
short summary; scenarios submit them with scripted module actions.

Usage:
    python console_demo.py
    python console_demo.py --scenario shopping
    python console_demo.py --scenario order
"""

import argparse
import asyncio
import json
from typing import Any, Union

from concierge.config import settings
from concierge.conversation.session import create_session
from concierge.conversation.turn import TurnResult, handle_message, handle_module_action
from concierge.schemas.message_schema import MessageType, WidgetMessage, user_message

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

Step = Union[str, dict[str, Any]]


class ConsoleSession:
    """One widget session driven from the terminal."""

    # Strings are typed messages; dicts are module actions the widget would send.
    SCENARIOS: dict[str, list[Step]] = {
        "shopping": [
            "I'm looking for a rose gold ring under $2,000",
            "show me more",
            {"type": "shortlist-product", "data": {"product": {
                "id": "prd-aurora-solitaire", "title": "Aurora Solitaire Ring",
                "slug": "aurora-solitaire-ring", "price": 1890,
            }}},
            {"type": "shortlist-escalate"},
            {"type": "submit-escalation", "data": {
                "name": "Ada", "email": "ada@example.com", "preferredChannel": "email",
            }},
        ],
        "order": [
            "Where is my order?",
            "It's ada@example.com, zip 10001",
            {"type": "text-updates"},
            {"type": "submit-csat", "data": {"rating": "great"}},
        ],
        "returns": [
            "ada@example.com 10001",
            "I'd like to return my ring",
            {"type": "submit-return-option", "data": {"option": "resize", "notes": "Half size down"}},
        ],
        "feedback": [
            "hmm",
            "not sure",
            {"type": "intent-chooser-select", "data": {"intent": "care_warranty"}},
            "/feedback",
            {"type": "submit-csat", "data": {"rating": "needs_follow_up"}},
        ],
    }

    MAX_INPUT_LENGTH = 500

    def __init__(self) -> None:
        self.state = create_session()
        self.transcript: list[WidgetMessage] = []

    def concierge_say(self, text: str) -> None:
        print(f"{GREEN}{BOLD}[Concierge]{RESET} {GREEN}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def render(self, message: WidgetMessage) -> None:
        if message.type == MessageType.ASSISTANT_TEXT:
            self.concierge_say(message.payload)
        elif message.type == MessageType.ORDER_STATUS:
            self.concierge_say(f"Order {message.payload['reference']}")
            for entry in message.payload["entries"]:
                marker = f"{YELLOW}*{RESET}" if entry.get("isCurrent") else " "
                print(f"   {marker} {entry['label']} ({entry['status']})")
        elif message.type == MessageType.CSAT_BAR:
            ratings = " / ".join(message.payload["ratings"])
            print(f"{YELLOW}  [{message.payload['prompt']} {ratings}]{RESET}")
        elif message.type == MessageType.MODULE:
            self._render_module(message.payload)
        else:
            self.system_log(f"Unrendered {message.type.value} message")

    def _render_module(self, payload: dict[str, Any]) -> None:
        kind = payload.get("type")
        if kind == "product-carousel":
            for product in payload["products"]:
                print(f"{YELLOW}   - {product['title']} (${product['price']:,.0f}){RESET}")
        elif kind == "intent-chooser":
            labels = ", ".join(option["label"] for option in payload["options"])
            print(f"{YELLOW}  [Choose: {labels}]{RESET}")
        elif kind == "shortlist-panel":
            titles = ", ".join(item.get("title") or item["id"] for item in payload["items"]) or "empty"
            print(f"{YELLOW}  [Shortlist: {titles}]{RESET}")
        else:
            print(f"{YELLOW}  [{kind} form]{RESET}")

    def apply(self, result: TurnResult) -> None:
        self.state = result.state
        self.transcript.extend(result.messages)
        if result.classification is not None:
            c = result.classification
            self.system_log(f"Intent: {c.intent.value} ({c.confidence:.2f}, {c.reason})")
        if result.error:
            self.system_log(f"{RED}Error: {result.error}{RESET}")
        for message in result.messages:
            self.render(message)

    def send(self, step: Step) -> None:
        if isinstance(step, str):
            print(f"\n{BLUE}[Guest] {RESET}{step}")
            self.transcript.append(user_message(step))
            result = asyncio.run(handle_message(step, self.state))
        else:
            print(f"\n{BLUE}[Guest action] {RESET}{step['type']} {DIM}{json.dumps(step.get('data', {}))}{RESET}")
            result = asyncio.run(handle_module_action(step, self.state))
        self.apply(result)

    def _banner(self, title: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  {settings.brand.name.upper()} CONCIERGE - {title}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        print()

    def _summary(self) -> None:
        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{DIM}  Session: {json.dumps(self.state.to_payload(), default=str)}{RESET}")
        print(f"{DIM}  Messages: {len(self.transcript)}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        steps = self.SCENARIOS.get(scenario)
        if not steps:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        self._banner(f"Scenario: {scenario}")
        self.concierge_say("Hi! I can help you shop, track an order, or reach a stylist.")
        for step in steps:
            self.send(step)
        self._summary()

    def run(self) -> None:
        self._banner("Console Demo")
        print(f"{DIM}  Type 'quit' to exit{RESET}")
        self.concierge_say("Hi! I can help you shop, track an order, or reach a stylist.")

        while True:
            user_input = input(f"\n{BLUE}[Guest] {RESET}").strip()
            if not user_input:
                continue
            if user_input.lower() in ("quit", "exit", "q"):
                print(f"\n{DIM}Session ended.{RESET}")
                break
            if len(user_input) > self.MAX_INPUT_LENGTH:
                self.concierge_say("That was quite long. Could you keep it brief for me?")
                continue
            self.transcript.append(user_message(user_input))
            self.apply(asyncio.run(handle_message(user_input, self.state)))
        self._summary()


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline concierge console demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    args = parser.parse_args()

    session = ConsoleSession()
    if args.scenario:
        session.run_scenario(args.scenario)
    else:
        session.run()


if __name__ == "__main__":
    main()
