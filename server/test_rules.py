"""
Test suite for play and calling rules.

Covers:
- Following suit, trump as one suit
- The partner's obligation to play the called card
- Leading restrictions for the called-card holder
- The picker's hold card, on lead and when void
- Calling options: normal, under, ten, forced alone

Run with: pytest test_rules.py -v
"""

from cards import Rank, Suit, card_from_id
from rules import CallType, callable_options, legal_plays


def cards(*ids: str):
    return [card_from_id(card_id) for card_id in ids]


def ids(result) -> set[str]:
    return {card.id for card in result}


# =============================================================================
# Following suit
# =============================================================================

class TestFollowing:

    def test_must_follow_fail_suit(self):
        hand = cards("A_clubs", "9_clubs", "K_hearts", "Q_spades")
        legal = legal_plays(hand, cards("10_clubs"))
        assert ids(legal) == {"A_clubs", "9_clubs"}

    def test_trump_lead_requires_trump(self):
        hand = cards("J_hearts", "7_diamonds", "A_clubs", "K_spades")
        legal = legal_plays(hand, cards("Q_clubs"))
        assert ids(legal) == {"J_hearts", "7_diamonds"}

    def test_jack_of_suit_does_not_follow_that_suit(self):
        hand = cards("J_clubs", "A_hearts")
        legal = legal_plays(hand, cards("K_clubs"))
        assert ids(legal) == {"J_clubs", "A_hearts"}

    def test_void_may_play_anything(self):
        hand = cards("A_hearts", "Q_clubs", "7_spades")
        legal = legal_plays(hand, cards("10_clubs"))
        assert ids(legal) == {"A_hearts", "Q_clubs", "7_spades"}

    def test_empty_hand_has_no_plays(self):
        assert legal_plays([], cards("A_clubs")) == []


# =============================================================================
# Called card obligations
# =============================================================================

class TestCalledCard:

    def test_partner_must_play_called_ace_first_time_led(self):
        hand = cards("A_hearts", "9_hearts", "Q_clubs")
        legal = legal_plays(hand, cards("K_hearts"), called_suit=Suit.HEARTS)
        assert ids(legal) == {"A_hearts"}

    def test_no_obligation_once_suit_has_been_led(self):
        hand = cards("A_hearts", "9_hearts", "Q_clubs")
        legal = legal_plays(
            hand, cards("K_hearts"), called_suit=Suit.HEARTS, called_suit_led=True
        )
        assert ids(legal) == {"A_hearts", "9_hearts"}

    def test_called_ten_must_be_played(self):
        hand = cards("10_spades", "7_spades", "J_diamonds")
        legal = legal_plays(
            hand, cards("K_spades"), called_suit=Suit.SPADES, called_rank=Rank.TEN
        )
        assert ids(legal) == {"10_spades"}

    def test_partner_leading_called_suit_must_lead_ace(self):
        hand = cards("A_clubs", "9_clubs", "8_clubs", "K_hearts")
        legal = legal_plays(hand, [], called_suit=Suit.CLUBS)
        assert ids(legal) == {"A_clubs", "K_hearts"}

    def test_partner_with_four_of_suit_may_run(self):
        hand = cards("A_clubs", "10_clubs", "9_clubs", "8_clubs", "K_hearts")
        legal = legal_plays(hand, [], called_suit=Suit.CLUBS)
        assert ids(legal) == ids(hand)

    def test_trump_does_not_count_toward_running(self):
        hand = cards("A_clubs", "9_clubs", "8_clubs", "J_clubs", "Q_clubs")
        legal = legal_plays(hand, [], called_suit=Suit.CLUBS)
        assert ids(legal) == {"A_clubs", "J_clubs", "Q_clubs"}


# =============================================================================
# Hold card
# =============================================================================

class TestHoldCard:

    def test_picker_may_not_lead_single_hold_card(self):
        hand = cards("9_hearts", "Q_clubs", "A_spades")
        legal = legal_plays(hand, [], called_suit=Suit.HEARTS, is_picker=True)
        assert ids(legal) == {"Q_clubs", "A_spades"}

    def test_picker_with_two_hold_cards_may_lead_either(self):
        hand = cards("9_hearts", "8_hearts", "Q_clubs")
        legal = legal_plays(hand, [], called_suit=Suit.HEARTS, is_picker=True)
        assert ids(legal) == ids(hand)

    def test_hold_card_leadable_after_suit_led(self):
        hand = cards("9_hearts", "Q_clubs")
        legal = legal_plays(
            hand, [], called_suit=Suit.HEARTS, called_suit_led=True, is_picker=True
        )
        assert ids(legal) == {"9_hearts", "Q_clubs"}

    def test_void_picker_may_not_shed_hold_card(self):
        hand = cards("9_hearts", "A_clubs", "K_clubs")
        legal = legal_plays(hand, cards("10_spades"), called_suit=Suit.HEARTS, is_picker=True)
        assert ids(legal) == {"A_clubs", "K_clubs"}

    def test_picker_follows_called_suit_with_hold_card(self):
        hand = cards("9_hearts", "A_clubs")
        legal = legal_plays(hand, cards("K_hearts"), called_suit=Suit.HEARTS, is_picker=True)
        assert ids(legal) == {"9_hearts"}

    def test_hold_card_is_last_card_still_legal(self):
        hand = cards("9_hearts")
        legal = legal_plays(hand, [], called_suit=Suit.HEARTS, is_picker=True)
        assert ids(legal) == {"9_hearts"}
        legal = legal_plays(hand, cards("A_spades"), called_suit=Suit.HEARTS, is_picker=True)
        assert ids(legal) == {"9_hearts"}

    def test_non_picker_has_no_hold_card(self):
        hand = cards("9_hearts", "Q_clubs")
        legal = legal_plays(hand, [], called_suit=Suit.HEARTS)
        assert ids(legal) == {"9_hearts", "Q_clubs"}


# =============================================================================
# Calling options
# =============================================================================

class TestCallableOptions:

    def test_normal_call_offers_only_suits_held_without_ace(self):
        hand = cards(
            "Q_clubs", "Q_spades", "J_hearts", "A_diamonds",
            "9_hearts", "K_hearts", "A_spades", "7_spades",
        )
        result = callable_options(hand)
        assert not result.go_alone
        assert not result.must_select_under_card
        assert [(o.suit, o.rank, o.type) for o in result.options] == [
            (Suit.HEARTS, Rank.ACE, CallType.NORMAL),
        ]

    def test_void_suit_is_not_a_normal_option(self):
        hand = cards(
            "Q_clubs", "Q_spades", "J_hearts", "A_diamonds",
            "9_hearts", "K_spades", "7_spades", "8_diamonds",
        )
        result = callable_options(hand)
        assert {o.suit for o in result.options} == {Suit.HEARTS, Suit.SPADES}

    def test_aces_of_hearts_and_spades_no_clubs_gives_under_clubs(self):
        hand = cards(
            "Q_clubs", "Q_spades", "J_hearts", "J_diamonds",
            "A_diamonds", "7_diamonds", "A_hearts", "A_spades",
        )
        result = callable_options(hand)
        assert not result.go_alone
        assert result.must_select_under_card
        assert [(o.suit, o.rank, o.type) for o in result.options] == [
            (Suit.CLUBS, Rank.ACE, CallType.UNDER),
        ]

    def test_no_fail_at_all_calls_under_any_suit(self):
        hand = cards(
            "Q_clubs", "Q_spades", "Q_hearts", "Q_diamonds",
            "J_clubs", "J_spades", "J_hearts", "J_diamonds",
        )
        result = callable_options(hand)
        assert result.must_select_under_card
        assert {o.suit for o in result.options} == {Suit.HEARTS, Suit.SPADES, Suit.CLUBS}
        assert all(o.type == CallType.UNDER for o in result.options)

    def test_all_three_aces_calls_a_ten(self):
        hand = cards(
            "Q_clubs", "Q_spades", "J_hearts", "J_diamonds",
            "A_hearts", "A_spades", "A_clubs", "10_clubs",
        )
        result = callable_options(hand)
        assert not result.go_alone
        assert not result.must_select_under_card
        assert {(o.suit, o.rank) for o in result.options} == {
            (Suit.HEARTS, Rank.TEN),
            (Suit.SPADES, Rank.TEN),
        }
        assert all(o.type == CallType.UNDER for o in result.options)

    def test_all_aces_and_tens_forces_alone(self):
        hand = cards(
            "Q_clubs", "Q_spades", "A_hearts", "A_spades",
            "A_clubs", "10_hearts", "10_spades", "10_clubs",
        )
        result = callable_options(hand)
        assert result.go_alone
        assert result.options == []
        assert "all 3 fail aces" in result.reason

    def test_to_dict(self):
        hand = cards(
            "Q_clubs", "Q_spades", "J_hearts", "A_diamonds",
            "9_hearts", "K_hearts", "A_spades", "7_spades",
        )
        assert callable_options(hand).to_dict() == {
            "go_alone": False,
            "must_select_under_card": False,
            "options": [{"suit": "hearts", "rank": "A", "type": "normal"}],
        }

    def test_find(self):
        hand = cards(
            "Q_clubs", "Q_spades", "J_hearts", "A_diamonds",
            "9_hearts", "K_hearts", "A_spades", "7_spades",
        )
        result = callable_options(hand)
        assert result.find(Suit.HEARTS).rank == Rank.ACE
        assert result.find(Suit.CLUBS) is None
