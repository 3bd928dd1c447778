"""
Hand scoring for 5-handed Wisconsin Sheepshead.

Normal hand:
    Card points from tricks are summed per seat and the buried cards
    count for the picker. The picking team (picker plus revealed partner)
    wins with 61 or more of the 120 points.

    Multipliers:
        - Schneider (x2): the losing side is held to 29 or fewer when the
          pickers win, or to 30 or fewer when the defenders win
          (pickers need 91+, defenders need 90+)
        - Schwarz (x3): the losing side took no tricks at all

    Payout per multiplier unit:
        - Picker: 2 (4 when playing alone)
        - Partner: 1
        - Each defender: 1, with the opposite sign
    Scores always sum to zero.

Schwanzer (everyone passed):
    Each dealt hand is tallied Q=3, J=2, other diamonds=1. The seat(s)
    with the highest tally lose, and a fixed table by loser count
    decides the payout.
"""

from dataclasses import dataclass, field
from typing import Optional

from cards import Card, Rank, Suit, points_in
from constants import (
    SCHNEIDER_DEFENDERS_MAX,
    SCHNEIDER_PICKERS_MAX,
    SCHWANZER_DIAMOND_POINTS,
    SCHWANZER_JACK_POINTS,
    SCHWANZER_PAYOUTS,
    SCHWANZER_QUEEN_POINTS,
    TOTAL_POINTS,
    WIN_THRESHOLD,
)

PICKER_UNITS = 2
ALONE_PICKER_UNITS = 4


@dataclass
class NormalHandResult:
    """Outcome of a hand that was picked and played out."""

    picker: str
    partner: Optional[str]
    called_suit: Optional[Suit]
    called_rank: Optional[Rank]
    picking_team: list[str]
    defending_team: list[str]
    picking_points: int
    defending_points: int
    picking_tricks: int
    defending_tricks: int
    buried_points: int
    pickers_win: bool
    schneider: bool
    schwarz: bool
    multiplier: int
    scores: dict[str, int] = field(default_factory=dict)
    player_points: dict[str, int] = field(default_factory=dict)

    type = "normal"

    @property
    def is_alone(self) -> bool:
        return len(self.picking_team) == 1

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "picker": self.picker,
            "partner": self.partner,
            "called_suit": self.called_suit.value if self.called_suit else None,
            "called_rank": self.called_rank.value if self.called_rank else None,
            "picking_team": list(self.picking_team),
            "defending_team": list(self.defending_team),
            "picking_points": self.picking_points,
            "defending_points": self.defending_points,
            "picking_team_tricks": self.picking_tricks,
            "defending_team_tricks": self.defending_tricks,
            "buried_points": self.buried_points,
            "pickers_win": self.pickers_win,
            "schneider": self.schneider,
            "schwarz": self.schwarz,
            "multiplier": self.multiplier,
            "is_alone": self.is_alone,
            "scores": dict(self.scores),
            "player_points": dict(self.player_points),
        }


@dataclass
class SchwanzerResult:
    """Outcome of a hand in which all five seats passed."""

    losers: list[str]
    winners: list[str]
    max_points: int
    player_points: dict[str, int] = field(default_factory=dict)
    scores: dict[str, int] = field(default_factory=dict)

    type = "schwanzer"

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "losers": list(self.losers),
            "winners": list(self.winners),
            "max_points": self.max_points,
            "player_points": dict(self.player_points),
            "scores": dict(self.scores),
        }


def is_schneider(pickers_win: bool, picking_points: int) -> bool:
    """Whether the losing side was held under its schneider line."""
    if pickers_win:
        return TOTAL_POINTS - picking_points <= SCHNEIDER_DEFENDERS_MAX
    return picking_points <= SCHNEIDER_PICKERS_MAX


def score_normal_hand(
    seat_order: list[str],
    picker: str,
    partner: Optional[str],
    tricks_won: dict[str, list[list[Card]]],
    buried: list[Card],
    called_suit: Optional[Suit] = None,
    called_rank: Optional[Rank] = None,
) -> NormalHandResult:
    """
    Score a completed normal hand.

    Args:
        seat_order: All five player ids.
        picker: The picker's id.
        partner: The revealed partner's id. None, or the picker's own id
            (after an under card reveal), means the picker played alone.
        tricks_won: Player id -> cards of each trick that player took.
        buried: The two buried cards, which count for the picker.
        called_suit: Suit that was called, if any (reported only).
        called_rank: Rank that was called, if any (reported only).

    Returns:
        NormalHandResult with team totals, multiplier and per-seat scores.
    """
    player_points = {
        pid: sum(points_in(trick) for trick in tricks_won.get(pid, []))
        for pid in seat_order
    }
    buried_points = points_in(buried)
    player_points[picker] += buried_points

    picking_team = [picker]
    if partner and partner != picker:
        picking_team.append(partner)
    defending_team = [pid for pid in seat_order if pid not in picking_team]

    picking_points = sum(player_points[pid] for pid in picking_team)
    defending_points = TOTAL_POINTS - picking_points

    picking_tricks = sum(len(tricks_won.get(pid, [])) for pid in picking_team)
    defending_tricks = sum(len(tricks_won.get(pid, [])) for pid in defending_team)

    pickers_win = picking_points >= WIN_THRESHOLD
    schneider = is_schneider(pickers_win, picking_points)
    losing_tricks = defending_tricks if pickers_win else picking_tricks
    schwarz = losing_tricks == 0

    if schwarz:
        multiplier = 3
    elif schneider:
        multiplier = 2
    else:
        multiplier = 1

    sign = 1 if pickers_win else -1
    picker_units = PICKER_UNITS if len(picking_team) == 2 else ALONE_PICKER_UNITS

    scores = {}
    for pid in seat_order:
        if pid == picker:
            scores[pid] = sign * multiplier * picker_units
        elif pid in picking_team:
            scores[pid] = sign * multiplier
        else:
            scores[pid] = -sign * multiplier

    return NormalHandResult(
        picker=picker,
        partner=partner,
        called_suit=called_suit,
        called_rank=called_rank,
        picking_team=picking_team,
        defending_team=defending_team,
        picking_points=picking_points,
        defending_points=defending_points,
        picking_tricks=picking_tricks,
        defending_tricks=defending_tricks,
        buried_points=buried_points,
        pickers_win=pickers_win,
        schneider=schneider,
        schwarz=schwarz,
        multiplier=multiplier,
        scores=scores,
        player_points=player_points,
    )


def schwanzer_points(cards: list[Card]) -> int:
    """Queens 3, Jacks 2, any other diamond 1, everything else 0."""
    total = 0
    for card in cards:
        if card.rank == Rank.QUEEN:
            total += SCHWANZER_QUEEN_POINTS
        elif card.rank == Rank.JACK:
            total += SCHWANZER_JACK_POINTS
        elif card.suit == Suit.DIAMONDS:
            total += SCHWANZER_DIAMOND_POINTS
    return total


def score_schwanzer(
    seat_order: list[str],
    hands: dict[str, list[Card]],
) -> SchwanzerResult:
    """
    Score a hand that everyone passed.

    Args:
        seat_order: All five player ids.
        hands: Player id -> the six cards dealt to that seat.

    Returns:
        SchwanzerResult. Every seat tied at the highest tally loses.
    """
    player_points = {pid: schwanzer_points(hands[pid]) for pid in seat_order}
    max_points = max(player_points.values())

    losers = [pid for pid in seat_order if player_points[pid] == max_points]
    winners = [pid for pid in seat_order if player_points[pid] < max_points]

    loser_score, winner_score = SCHWANZER_PAYOUTS[len(losers)]
    scores = {
        pid: loser_score if pid in losers else winner_score
        for pid in seat_order
    }

    return SchwanzerResult(
        losers=losers,
        winners=winners,
        max_points=max_points,
        player_points=player_points,
        scores=scores,
    )
