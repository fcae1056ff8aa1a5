"""
Tests for the reducer (state transitions).

Tests:
- Card deltas and affordability
- Action application and rejection
- Day end: lose / win / next day
- Out-of-contract actions
"""

import random
from dataclasses import asdict

import pytest

from ..engine_core.action import Action, ActionType
from ..engine_core.cards import Card, Suit, generate_deck, shuffle
from ..engine_core.events import EventType, InvalidReason, Lacks
from ..engine_core.reducer import Reducer, apply_action, get_delta, get_lacks
from ..engine_core.state import GameState, Resources, new_game_state
from .conftest import make_state


class TestGetDelta:
    """Tests for card deltas."""

    def test_action_point_cost_by_slot(self, state):
        costs = [get_delta(i, state).action_points for i in range(4)]
        assert costs == [-1, -2, -3, -4]

    @pytest.mark.parametrize("suit, energy", [
        (Suit.CLUBS, 1),
        (Suit.DIAMONDS, 0),
        (Suit.HEARTS, -1),
        (Suit.SPADES, -3),
    ])
    def test_energy_by_suit(self, suit, energy):
        state = make_state(hand=[Card(5, suit)] * 4)
        assert get_delta(0, state).energy == energy

    @pytest.mark.parametrize("value, money, victory_points", [
        (1, -5, 50),
        (2, 2, 0),
        (7, 7, 0),
        (10, 10, 0),
        (11, -5, 10),
        (12, -5, 20),
        (13, -5, 30),
    ])
    def test_money_and_victory_points_by_value(self, value, money, victory_points):
        state = make_state(hand=[Card(value, Suit.DIAMONDS)] * 4)
        delta = get_delta(0, state)

        assert delta.money == money
        assert delta.victory_points == victory_points

    def test_delta_ignores_resources(self, state):
        before = get_delta(2, state)
        state.money = -10
        state.energy = 0
        state.action_points = 0

        assert get_delta(2, state) == before

    def test_delta_does_not_mutate(self, state):
        snapshot = state.snapshot()
        for i in range(4):
            get_delta(i, state)
        assert state.snapshot() == snapshot


class TestGetLacks:
    """Tests for affordability checks."""

    def test_affordable_returns_none(self, state):
        assert get_lacks(Resources(action_points=-1, energy=-3, money=-8), state) is None

    def test_flags_only_negative_dimensions(self, state):
        lacks = get_lacks(Resources(action_points=-6, energy=0, money=-9), state)
        assert lacks == Lacks(action_points=True, energy=False, money=True)

    def test_victory_points_never_lack(self, state):
        assert get_lacks(Resources(victory_points=-100), state) is None

    def test_lacks_match_application(self):
        """Lack flags are exactly the resources that would go negative."""
        rng = random.Random(5)
        for _ in range(300):
            deck = shuffle(generate_deck(), rng)
            state = make_state(
                hand=deck[:4],
                draw_pile=deck[4:],
                action_points=rng.randint(0, 5),
                energy=rng.randint(0, 6),
                money=rng.randint(0, 12),
            )
            index = rng.randint(0, 3)
            delta = get_delta(index, state)
            lacks = get_lacks(delta, state)
            before = state.resources

            event = apply_action(Action.use_card(index), state)

            would_go_negative = {
                "action_points": before.action_points + delta.action_points < 0,
                "energy": before.energy + delta.energy < 0,
                "money": before.money + delta.money < 0,
            }
            if any(would_go_negative.values()):
                assert asdict(lacks) == would_go_negative
                assert event.event_type == EventType.NOT_ENOUGH_RESOURCES
                assert state.resources == before
            else:
                assert lacks is None
                assert event.event_type == EventType.USE_CARD
                assert state.action_points == before.action_points + delta.action_points
                assert state.energy == before.energy + delta.energy
                assert state.money == before.money + delta.money
                assert state.victory_points == before.victory_points + delta.victory_points


class TestUseCard:
    """Tests for the use-card action."""

    def test_use_card_applies_delta(self, state):
        event = apply_action(Action.use_card(1), state)  # 3 of Clubs

        assert event.event_type == EventType.USE_CARD
        assert state.action_points == 3
        assert state.energy == 4
        assert state.money == 11
        assert state.victory_points == 0
        assert state.used == [False, True, False, False]

    def test_second_use_rejected(self, state):
        first = apply_action(Action.use_card(0), state)
        snapshot = state.snapshot()
        second = apply_action(Action.use_card(0), state)

        assert first.event_type == EventType.USE_CARD
        assert second.event_type == EventType.CARD_ALREADY_USED
        assert state.snapshot() == snapshot

    def test_unaffordable_card_rejected_without_mutation(self, face_hand_state):
        # Ace of Spades: energy -3 from 3 is fine, money -5 from 8 is fine
        face_hand_state.energy = 2
        snapshot = face_hand_state.snapshot()

        event = apply_action(Action.use_card(0), face_hand_state)

        assert event.event_type == EventType.NOT_ENOUGH_RESOURCES
        assert event.lacks == Lacks(action_points=False, energy=True, money=False)
        assert face_hand_state.snapshot() == snapshot

    def test_last_slot_needs_four_action_points(self, state):
        state.action_points = 3
        event = apply_action(Action.use_card(3), state)

        assert event.event_type == EventType.NOT_ENOUGH_RESOURCES
        assert event.lacks.action_points
        assert state.used[3] is False

    def test_face_card_scores(self, face_hand_state):
        event = apply_action(Action.use_card(0), face_hand_state)  # Ace of Spades

        assert event.event_type == EventType.USE_CARD
        assert face_hand_state.victory_points == 50
        assert face_hand_state.money == 3
        assert face_hand_state.energy == 0


class TestFreelanceAndRecuperate:
    """Tests for the one-point actions."""

    def test_freelance(self):
        state = make_state(action_points=1, money=5, energy=5)

        event = apply_action(Action.freelance(), state)
        assert event.event_type == EventType.FREELANCE
        assert state.action_points == 0
        assert state.money == 6

        event = apply_action(Action.freelance(), state)
        assert event.event_type == EventType.NOT_ENOUGH_RESOURCES
        assert event.lacks == Lacks(action_points=True, energy=False, money=False)
        assert state.action_points == 0
        assert state.money == 6

    def test_recuperate(self):
        state = make_state(action_points=1, money=5, energy=5)

        event = apply_action(Action.recuperate(), state)
        assert event.event_type == EventType.RECUPERATE
        assert state.action_points == 0
        assert state.energy == 6

        event = apply_action(Action.recuperate(), state)
        assert event.event_type == EventType.NOT_ENOUGH_RESOURCES
        assert event.lacks == Lacks(action_points=True, energy=False, money=False)
        assert state.energy == 6


class TestEndDay:
    """Tests for day end."""

    def test_lose_when_money_runs_out(self):
        state = make_state(money=3, energy=0)

        event = apply_action(Action.end_day(), state)

        assert event.event_type == EventType.LOSE
        assert state.money == -1
        assert state.energy == -1
        assert state.game_ended

    def test_lose_when_energy_runs_out(self):
        state = make_state(money=10, energy=0)

        event = apply_action(Action.end_day(), state)

        assert event.event_type == EventType.LOSE
        assert state.game_ended

    def test_day_end_charges_upkeep(self, state):
        event = apply_action(Action.end_day(), state)

        assert event.event_type == EventType.DAY_END
        assert state.money == 4
        assert state.energy == 2
        assert not state.game_ended

    def test_end_day_not_gated_by_action_points(self, state):
        state.action_points = 5
        event = apply_action(Action.end_day(), state)
        assert event.event_type == EventType.DAY_END

    def test_win_on_day_13(self):
        state = make_state(day=13, money=6, energy=1, victory_points=120, draw_pile=[])

        event = apply_action(Action.end_day(), state)

        assert event.event_type == EventType.WIN
        assert event.score == 120 + 2
        assert state.game_ended

    def test_lose_beats_win_on_day_13(self):
        state = make_state(day=13, money=3, energy=5, victory_points=200, draw_pile=[])

        event = apply_action(Action.end_day(), state)

        assert event.event_type == EventType.LOSE


class TestBeginNextDay:
    """Tests for the day-begin sequence."""

    def test_deals_fresh_hand(self, state):
        apply_action(Action.use_card(0), state)
        apply_action(Action.end_day(), state)
        pile_before = len(state.draw_pile)
        top_four = state.draw_pile[-4:][::-1]

        event = apply_action(Action.begin_next_day(), state)

        assert event.event_type == EventType.DAY_START
        assert state.day == 2
        assert state.action_points == 5
        assert len(state.day_cards) == 4
        assert state.day_cards == top_four
        assert state.used == [False] * 4
        assert len(state.draw_pile) == pile_before - 4

    def test_energy_upkeep_when_lead_card_is_cheap(self):
        lead = Card(2, Suit.HEARTS)
        pile = [Card(9, Suit.CLUBS), Card(8, Suit.CLUBS), Card(7, Suit.CLUBS), lead]
        state = make_state(draw_pile=pile, energy=3)

        event = apply_action(Action.begin_next_day(), state)

        assert state.day_cards[0] == lead
        assert state.energy == 2
        assert event.energy_loss == 1

    def test_no_upkeep_when_lead_card_is_expensive(self):
        pile = [Card(2, Suit.CLUBS), Card(3, Suit.CLUBS), Card(4, Suit.CLUBS), Card(13, Suit.SPADES)]
        state = make_state(draw_pile=pile, energy=10)

        event = apply_action(Action.begin_next_day(), state)

        # King counts as 10; energy 10 is not above it
        assert state.energy == 10
        assert event.energy_loss == 0


class TestInvalidActions:
    """Out-of-contract actions are rejected as InvalidAction events."""

    @pytest.mark.parametrize("index", [-1, 4, 100])
    def test_index_out_of_range(self, state, index):
        snapshot = state.snapshot()
        event = apply_action(Action.use_card(index), state)

        assert event.event_type == EventType.INVALID_ACTION
        assert event.reason == InvalidReason.CARD_INDEX_OUT_OF_RANGE
        assert state.snapshot() == snapshot

    def test_missing_index(self, state):
        event = apply_action(Action(action_type=ActionType.USE_CARD), state)
        assert event.reason == InvalidReason.CARD_INDEX_OUT_OF_RANGE

    @pytest.mark.parametrize("action", [
        Action.use_card(0),
        Action.freelance(),
        Action.recuperate(),
        Action.end_day(),
        Action.begin_next_day(),
    ])
    def test_no_actions_after_game_over(self, action):
        state = make_state(money=3, energy=0)
        apply_action(Action.end_day(), state)
        snapshot = state.snapshot()

        event = apply_action(action, state)

        assert event.event_type == EventType.INVALID_ACTION
        assert event.reason == InvalidReason.GAME_OVER
        assert state.snapshot() == snapshot

    def test_begin_next_day_with_empty_pile(self):
        state = make_state(draw_pile=[])
        event = apply_action(Action.begin_next_day(), state)

        assert event.reason == InvalidReason.DRAW_PILE_EXHAUSTED
        assert state.day == 1


class TestReducer:
    """Tests for the reducer dispatch table."""

    def test_every_action_type_has_handler(self):
        assert set(Reducer().handlers()) == set(ActionType)

    def test_dispatch_table_built_once(self, state, monkeypatch):
        reducer = Reducer()
        monkeypatch.setattr(reducer, "handlers", lambda: pytest.fail("table rebuilt"))

        reducer.apply(state, Action.freelance())
        reducer.apply(state, Action.recuperate())

        assert state.action_points == 3


class TestActionWireForm:
    """Parsing and formatting actions as {"type": ..., "index": ...}."""

    @pytest.mark.parametrize("action", [
        Action.use_card(2),
        Action.freelance(),
        Action.end_day(),
    ])
    def test_dict_form(self, action):
        assert Action.from_dict(action.to_dict()) == action

    def test_index_only_for_use_card(self):
        assert Action.freelance().to_dict() == {"type": "Freelance"}
        assert Action.use_card(1).to_dict() == {"type": "UseCard", "index": 1}

    @pytest.mark.parametrize("data", [
        {"type": "Steal"},
        {"type": "UseCard"},
        {"type": "UseCard", "index": "2"},
        {"type": "UseCard", "index": True},
    ])
    def test_malformed(self, data):
        with pytest.raises(ValueError):
            Action.from_dict(data)


class TestFullGame:
    """A whole game played through the engine alone."""

    def test_thirteen_days_consume_the_deck(self):
        state, _ = new_game_state(random.Random(3))
        state.money = 1000
        state.energy = 1000

        for day in range(1, 14):
            assert state.day == day
            event = apply_action(Action.end_day(), state)
            if day < 13:
                assert event.event_type == EventType.DAY_END
                apply_action(Action.begin_next_day(), state)

        assert event.event_type == EventType.WIN
        assert event.score == state.victory_points + state.money
        assert state.draw_pile == []
        assert state.game_ended

    def test_starting_state(self):
        state, event = new_game_state(random.Random(11))

        assert isinstance(state, GameState)
        assert state.day == 1
        assert state.action_points == 5
        assert state.money == 8
        assert state.victory_points == 0
        assert state.energy == 3 - event.energy_loss
        assert len(state.day_cards) == 4
        assert len(state.draw_pile) == 48
        assert state.used == [False] * 4
        assert not state.game_ended
        assert set(state.day_cards).isdisjoint(state.draw_pile)
