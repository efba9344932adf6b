import logging

import pytest

from uno.logic.cards import HAND_SIZE
from uno.logic.enums import CardColor, RoomStatus, ShuffleSource
from uno.logic.events import (
    CardDrawnEvent,
    CardPlayedEvent,
    GameCompletedEvent,
    GameStartedEvent,
    PenaltyDrawnEvent,
)
from uno.logic.exceptions import ArgumentError, DeckExhaustedError, StateError
from uno.logic.turn import deal_game, draw_card, play_card
from uno.tests.conftest import ALICE, BOB, CAROL, DAVE, START_TIME, card, create_room_state

NOW = START_TIME + 60


def _three_player_room(alice_hand, current, **kwargs):
    return create_room_state(
        3,
        hands=[alice_hand, [card("green", "1"), card("green", "2")], [card("yellow", "1")]],
        current_card=current,
        **kwargs,
    )


class TestDealGame:
    @pytest.mark.parametrize(("player_count", "deck_size"), [(2, 93), (3, 86), (4, 79)])
    def test_deals_seven_each_and_turns_up_a_card(self, player_count, deck_size) -> None:
        room = create_room_state(player_count)
        dealt, events = deal_game(room, seed=NOW, now=NOW, shuffle_source=ShuffleSource.LEDGER_TIME)

        assert dealt.status is RoomStatus.IN_PROGRESS
        assert all(len(hand) == HAND_SIZE for hand in dealt.hands)
        assert len(dealt.deck) == deck_size
        assert dealt.current_card is not None
        assert dealt.current_card.color is not CardColor.BLACK
        assert dealt.card_count() == 108
        assert dealt.current_player_index == 0
        assert dealt.direction == 1
        assert dealt.game_started_at == NOW
        assert events == [GameStartedEvent(first_card=dealt.current_card, deck_size=deck_size)]

    def test_same_seed_same_deal(self) -> None:
        room = create_room_state(2)
        first, _ = deal_game(room, seed=12345, now=NOW, shuffle_source=ShuffleSource.LEDGER_TIME)
        second, _ = deal_game(room, seed=12345, now=NOW + 5, shuffle_source=ShuffleSource.LEDGER_TIME)
        assert first.hands == second.hands
        assert first.deck == second.deck

    def test_different_seeds_differ(self) -> None:
        room = create_room_state(2)
        first, _ = deal_game(room, seed=1, now=NOW, shuffle_source=ShuffleSource.SECURE)
        second, _ = deal_game(room, seed=2, now=NOW, shuffle_source=ShuffleSource.SECURE)
        assert first.deck != second.deck


class TestPlayCardValidation:
    def test_waiting_room_rejected(self) -> None:
        room = create_room_state(1, max_players=2)
        with pytest.raises(StateError, match="not in progress"):
            play_card(room, ALICE, 0, None, now=NOW)

    def test_out_of_turn_rejected(self) -> None:
        room = _three_player_room([card("red", "5")], card("red", "3"))
        with pytest.raises(StateError, match="not your turn"):
            play_card(room, BOB, 0, None, now=NOW)

    def test_unseated_player_rejected(self) -> None:
        room = _three_player_room([card("red", "5")], card("red", "3"))
        with pytest.raises(StateError, match="not seated"):
            play_card(room, DAVE, 0, None, now=NOW)

    @pytest.mark.parametrize("index", [-1, 2, 10])
    def test_index_out_of_range(self, index) -> None:
        room = _three_player_room([card("red", "5"), card("blue", "9")], card("red", "3"))
        with pytest.raises(ArgumentError, match="out of range"):
            play_card(room, ALICE, index, None, now=NOW)

    def test_illegal_card(self) -> None:
        room = _three_player_room([card("red", "5"), card("blue", "9")], card("red", "3"))
        with pytest.raises(ArgumentError, match="cannot be played"):
            play_card(room, ALICE, 1, None, now=NOW)

    @pytest.mark.parametrize("chosen", [None, CardColor.BLACK])
    def test_wild_requires_playable_color(self, chosen) -> None:
        room = _three_player_room([card("black", "Wild"), card("blue", "9")], card("red", "3"))
        with pytest.raises(ArgumentError, match="requires a chosen color"):
            play_card(room, ALICE, 0, chosen, now=NOW)

    def test_rejected_play_leaves_room_untouched(self) -> None:
        room = _three_player_room([card("red", "5"), card("blue", "9")], card("red", "3"))
        with pytest.raises(ArgumentError):
            play_card(room, ALICE, 1, None, now=NOW)
        assert room.hands[0] == (card("red", "5"), card("blue", "9"))


class TestPlayCardEffects:
    def test_number_card_passes_turn(self) -> None:
        room = _three_player_room([card("red", "5"), card("blue", "9")], card("red", "3"))
        new_room, events = play_card(room, ALICE, 0, None, now=NOW)

        assert new_room.current_card == card("red", "5")
        assert new_room.hands[0] == (card("blue", "9"),)
        assert new_room.current_player_index == 1
        assert new_room.card_count() == 108
        assert events == [CardPlayedEvent(player=ALICE, card=card("red", "5"), next_player_index=1)]

    def test_non_wild_ignores_chosen_color(self) -> None:
        room = _three_player_room([card("red", "5"), card("blue", "9")], card("red", "3"))
        new_room, events = play_card(room, ALICE, 0, CardColor.GREEN, now=NOW)
        assert new_room.current_card == card("red", "5")
        assert events[0].chosen_color is None

    def test_wild_takes_chosen_color(self) -> None:
        room = _three_player_room([card("black", "Wild"), card("blue", "9")], card("red", "3"))
        new_room, events = play_card(room, ALICE, 0, CardColor.GREEN, now=NOW)
        assert new_room.current_card == card("green", "Wild")
        assert new_room.current_player_index == 1
        assert events[0].chosen_color is CardColor.GREEN
        assert new_room.card_count() == 108

    def test_wild4_makes_next_player_draw_four(self) -> None:
        room = _three_player_room([card("black", "Wild4"), card("blue", "9")], card("red", "3"))
        top_four = tuple(reversed(room.deck[-4:]))
        new_room, events = play_card(room, ALICE, 0, CardColor.YELLOW, now=NOW)

        assert new_room.current_card == card("yellow", "Wild4")
        assert new_room.hands[1] == (card("green", "1"), card("green", "2"), *top_four)
        assert len(new_room.deck) == len(room.deck) - 4
        assert new_room.current_player_index == 1
        assert PenaltyDrawnEvent(player=BOB, count=4) in events

    def test_skip_jumps_one_player(self) -> None:
        room = _three_player_room([card("red", "Skip"), card("blue", "9")], card("red", "3"))
        new_room, _ = play_card(room, ALICE, 0, None, now=NOW)
        assert new_room.current_player_index == 2

    def test_reverse_with_three_players_turns_back(self) -> None:
        room = _three_player_room([card("red", "Reverse"), card("blue", "9")], card("red", "3"))
        new_room, events = play_card(room, ALICE, 0, None, now=NOW)
        assert new_room.direction == -1
        assert new_room.current_player_index == 2
        assert events[0].next_player_index == 2

    def test_reverse_then_number_keeps_new_direction(self) -> None:
        room = _three_player_room(
            [card("red", "5"), card("blue", "9")],
            card("red", "3"),
            direction=-1,
            current_player_index=0,
        )
        new_room, _ = play_card(room, ALICE, 0, None, now=NOW)
        assert new_room.current_player_index == 2

    def test_reverse_with_two_players_acts_as_skip(self) -> None:
        hands = [[card("red", "Reverse"), card("blue", "9")], [card("green", "1")]]
        reverse_room = create_room_state(2, hands=hands, current_card=card("red", "3"))
        after_reverse, _ = play_card(reverse_room, ALICE, 0, None, now=NOW)

        hands = [[card("red", "Skip"), card("blue", "9")], [card("green", "1")]]
        skip_room = create_room_state(2, hands=hands, current_card=card("red", "3"))
        after_skip, _ = play_card(skip_room, ALICE, 0, None, now=NOW)

        assert after_reverse.current_player_index == after_skip.current_player_index == 0
        assert after_reverse.direction == -1

    def test_draw2_makes_next_player_draw_two(self) -> None:
        room = _three_player_room([card("red", "Draw2"), card("blue", "9")], card("red", "3"))
        new_room, events = play_card(room, ALICE, 0, None, now=NOW)
        assert len(new_room.hands[1]) == 4
        assert new_room.current_player_index == 1
        assert events[1] == PenaltyDrawnEvent(player=BOB, count=2)

    def test_draw2_counts_backwards_after_reverse(self) -> None:
        room = _three_player_room(
            [card("red", "Draw2"), card("blue", "9")],
            card("red", "3"),
            direction=-1,
        )
        new_room, _ = play_card(room, ALICE, 0, None, now=NOW)
        assert len(new_room.hands[2]) == 3
        assert len(new_room.hands[1]) == 2
        assert new_room.current_player_index == 2

    def test_penalty_capped_by_deck(self, caplog) -> None:
        room = _three_player_room([card("red", "Draw2"), card("blue", "9")], card("red", "3"))
        short = room.model_copy(update={"deck": room.deck[-1:], "hands": (*room.hands[:2], room.deck[:-1])})

        with caplog.at_level(logging.WARNING):
            new_room, events = play_card(short, ALICE, 0, None, now=NOW)

        assert new_room.deck == ()
        assert events[1] == PenaltyDrawnEvent(player=BOB, count=1)
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert warnings[0].msg["event"] == "deck ran out during penalty draw"
        assert warnings[0].msg["drawn"] == 1


class TestWinning:
    def test_last_card_completes_game(self) -> None:
        room = _three_player_room([card("red", "5")], card("red", "3"))
        new_room, events = play_card(room, ALICE, 0, None, now=NOW)

        assert new_room.status is RoomStatus.COMPLETED
        assert new_room.winner == ALICE
        assert new_room.game_ended_at == NOW
        assert new_room.current_player_index == 0
        assert events[-1] == GameCompletedEvent(winner=ALICE)

    def test_last_card_draw2_still_penalizes(self) -> None:
        room = _three_player_room([card("red", "Draw2")], card("red", "3"))
        new_room, events = play_card(room, ALICE, 0, None, now=NOW)
        assert new_room.winner == ALICE
        assert len(new_room.hands[1]) == 4
        assert [e.type for e in events] == ["card_played", "penalty_drawn", "game_completed"]

    def test_completed_room_rejects_further_play(self) -> None:
        room = _three_player_room([card("red", "5")], card("red", "3"))
        done, _ = play_card(room, ALICE, 0, None, now=NOW)
        with pytest.raises(StateError):
            play_card(done, ALICE, 0, None, now=NOW)


class TestDrawCard:
    def test_draws_top_card_and_passes_turn(self) -> None:
        room = _three_player_room([card("blue", "9")], card("red", "3"))
        top = room.deck[-1]
        new_room, events = draw_card(room, ALICE)
        assert new_room.hands[0] == (card("blue", "9"), top)
        assert new_room.current_player_index == 1
        assert events == [CardDrawnEvent(player=ALICE, next_player_index=1)]

    def test_draw_when_playable_is_allowed(self) -> None:
        room = _three_player_room([card("red", "9")], card("red", "3"))
        new_room, _ = draw_card(room, ALICE)
        assert len(new_room.hands[0]) == 2

    def test_out_of_turn(self) -> None:
        room = _three_player_room([card("blue", "9")], card("red", "3"))
        with pytest.raises(StateError):
            draw_card(room, CAROL)

    def test_empty_deck_raises(self) -> None:
        room = _three_player_room([card("blue", "9")], card("red", "3"))
        empty = room.model_copy(update={"deck": (), "hands": (*room.hands[:2], room.hands[2] + room.deck)})
        with pytest.raises(DeckExhaustedError):
            draw_card(empty, ALICE)
