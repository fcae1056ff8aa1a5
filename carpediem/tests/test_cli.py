"""
Tests for the terminal client.
"""

from argparse import Namespace

import pytest

from ..cli import EVENT_MESSAGES, cmd_deck, cmd_play, describe_event, parse_command
from ..engine_core.action import Action
from ..engine_core.events import Event, EventType, InvalidReason, Lacks


class TestParseCommand:

    @pytest.mark.parametrize("text, action", [
        ("1", Action.use_card(0)),
        (" 4 ", Action.use_card(3)),
        ("f", Action.freelance()),
        ("R", Action.recuperate()),
        ("e", Action.end_day()),
    ])
    def test_actions(self, text, action):
        assert parse_command(text) == action

    @pytest.mark.parametrize("text", ["q", "h", "?", "p 2"])
    def test_non_actions(self, text):
        assert parse_command(text) is None

    def test_unknown(self):
        with pytest.raises(ValueError):
            parse_command("x")


class TestDescribeEvent:

    def test_every_event_type_has_message(self):
        assert set(EVENT_MESSAGES) == set(EventType)

    def test_lacks_listed(self):
        event = Event.not_enough_resources(Lacks(action_points=True, energy=False, money=True))
        assert describe_event(event) == "Not enough action points, money."

    def test_win_shows_score(self):
        assert "Score: 42" in describe_event(Event.win(42))

    def test_invalid_shows_reason(self):
        event = Event.invalid(InvalidReason.GAME_OVER)
        assert "game_over" in describe_event(event)


class TestCommands:

    def test_deck_prints_52_cards(self):
        lines = []
        cmd_deck(Namespace(), output=lines.append)

        assert len(lines) == 52
        assert lines[0] == "AC\tAce of Clubs"

    def test_play_until_game_over(self):
        """Ending every day by hand finishes the game."""
        lines = []
        cmd_play(
            Namespace(seed=1, delay=0.0),
            input_fn=lambda prompt: "e",
            output=lines.append,
        )

        assert any("Game over" in line or "Score:" in line for line in lines)

    def test_play_quit(self):
        lines = []
        commands = iter(["p 1", "f", "q"])
        cmd_play(
            Namespace(seed=1, delay=0.0),
            input_fn=lambda prompt: next(commands),
            output=lines.append,
        )

        assert "You freelanced: +1 money." in lines
        assert lines[-1] == "Bye."

    def test_play_eof_quits(self):
        def eof(prompt):
            raise EOFError

        lines = []
        cmd_play(Namespace(seed=1, delay=0.0), input_fn=eof, output=lines.append)
        assert lines[-1] == "Bye."
