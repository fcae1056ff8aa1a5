"""
Carpe Diem CLI - Command-line interface for the engine.

Usage:
    carpediem play [--seed N] [--delay S]   Play a game in the terminal
    carpediem serve [--host H] [--port P]   Run the REST API
    carpediem deck                          Print the 52 card keys
"""

from __future__ import annotations
import argparse
import logging
import sys
import time
from typing import Callable

from .engine_core.action import Action
from .engine_core.cards import generate_deck
from .engine_core.events import Event, EventType
from .engine_core.reducer import get_delta, get_lacks
from .engine_core.state import GameState, DAYS

logger = logging.getLogger(__name__)


EVENT_MESSAGES: dict[EventType, Callable[[Event], str]] = {
    EventType.USE_CARD: lambda e: "Card used.",
    EventType.FREELANCE: lambda e: "You freelanced: +1 money.",
    EventType.RECUPERATE: lambda e: "You rested: +1 energy.",
    EventType.CARD_ALREADY_USED: lambda e: "That card is already used today.",
    EventType.NOT_ENOUGH_RESOURCES: lambda e: "Not enough " + ", ".join(
        name for name, lacking in (
            ("action points", e.lacks.action_points),
            ("energy", e.lacks.energy),
            ("money", e.lacks.money),
        ) if lacking
    ) + ".",
    EventType.INVALID_ACTION: lambda e: f"Invalid action ({e.reason.value}).",
    EventType.DAY_START: lambda e: (
        "A new day begins. Upkeep: -1 energy." if e.energy_loss else "A new day begins."
    ),
    EventType.DAY_END: lambda e: "The day ends. Paid 4 money and 1 energy.",
    EventType.WIN: lambda e: f"You made it through {DAYS} days! Score: {e.score}",
    EventType.LOSE: lambda e: "You ran out of money or energy. Game over.",
}

HELP_TEXT = """Commands:
  1-4    use the card in that slot
  f      freelance (1 AP -> +1 money)
  r      recuperate (1 AP -> +1 energy)
  e      end the day
  p N    preview card N
  q      quit"""


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration.

    Args:
        verbose: Enable verbose (DEBUG) logging
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ],
    )


def describe_event(event: Event) -> str:
    return EVENT_MESSAGES[event.event_type](event)


def parse_command(text: str) -> Action | None:
    """
    Turn a typed command into an Action.

    Returns None for commands that are not actions (help, preview, quit).
    Raises ValueError for unknown input.
    """
    command = text.strip().lower()
    if command in {"1", "2", "3", "4"}:
        return Action.use_card(int(command) - 1)
    if command == "f":
        return Action.freelance()
    if command == "r":
        return Action.recuperate()
    if command == "e":
        return Action.end_day()
    if command in {"q", "h", "?"} or command.startswith("p"):
        return None
    raise ValueError(f"Unknown command: {text!r}")


def format_delta(index: int, state: GameState) -> str:
    delta = get_delta(index, state)
    lacks = get_lacks(delta, state)
    parts = [
        f"AP {delta.action_points:+d}",
        f"energy {delta.energy:+d}",
        f"money {delta.money:+d}",
        f"VP {delta.victory_points:+d}",
    ]
    text = ", ".join(parts)
    if state.used[index]:
        return f"{text} (used)"
    if lacks:
        return f"{text} (can't afford)"
    return text


def format_state(state: GameState) -> str:
    lines = [
        f"Day {state.day}/{DAYS}  AP {state.action_points}  "
        f"Energy {state.energy}  Money {state.money}  VP {state.victory_points}",
    ]
    for i, card in enumerate(state.day_cards):
        marker = "x" if state.used[i] else " "
        lines.append(f"  [{marker}] {i + 1}: {card.key:<3} {card.name:<18} {format_delta(i, state)}")
    return "\n".join(lines)


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Carpe Diem - 13 days, four cards a day",
        prog="carpediem",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play a game in the terminal")
    play_parser.add_argument("--seed", type=int, default=None, help="Seed for the shuffle")
    play_parser.add_argument(
        "--delay", type=float, default=0.0,
        help="Seconds to wait before the day ends when action points run out",
    )

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the REST API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port")

    # Deck command
    subparsers.add_parser("deck", help="Print the card keys in deck order")

    args = parser.parse_args()
    setup_logging(args.verbose)

    if args.command == "play":
        cmd_play(args)
    elif args.command == "serve":
        cmd_serve(args)
    elif args.command == "deck":
        cmd_deck(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_play(args, input_fn: Callable[[str], str] = input, output: Callable[[str], None] = print):
    """Play a game interactively."""
    from .session import SessionManager, GameLoop, LoopState

    manager = SessionManager()
    session = manager.create_session(seed=args.seed)
    game_loop = GameLoop(session, end_day_delay=args.delay)

    output(HELP_TEXT)
    for event in game_loop.start().events:
        output(describe_event(event))

    while game_loop.state != LoopState.GAME_OVER:
        if game_loop.state == LoopState.END_DAY_PENDING:
            time.sleep(args.delay)
            result = game_loop.tick()
            for event in result.events:
                output(describe_event(event))
            continue

        output("")
        output(format_state(session.game_state))
        try:
            text = input_fn("> ")
        except EOFError:
            text = "q"

        try:
            action = parse_command(text)
        except ValueError as e:
            output(str(e))
            continue

        command = text.strip().lower()
        if command == "q":
            game_loop.cancel_pending()
            manager.end_session(session.session_id, reason="quit")
            output("Bye.")
            return
        if action is None:
            output(preview_text(command, session.game_state))
            continue

        result = game_loop.submit(action)
        for event in result.events:
            output(describe_event(event))

    manager.end_session(session.session_id)


def preview_text(command: str, state: GameState) -> str:
    """Answer the non-action commands (help, preview)."""
    slot = command[1:].strip()
    if command.startswith("p") and slot in {"1", "2", "3", "4"}:
        index = int(slot) - 1
        card = state.day_cards[index]
        return f"{card.name}: {format_delta(index, state)}"
    return HELP_TEXT


def cmd_serve(args):
    """Run the REST API with uvicorn."""
    import uvicorn

    logger.info("Serving Carpe Diem API on %s:%d", args.host, args.port)
    uvicorn.run("carpediem.api.app:app", host=args.host, port=args.port)


def cmd_deck(args, output: Callable[[str], None] = print):
    """Print the deck in enumeration order."""
    for card in generate_deck():
        output(f"{card.key}\t{card.name}")


if __name__ == "__main__":
    main()
