from typing import Dict, List, NamedTuple


class RoundResult(NamedTuple):
    total: int
    participant_count: int
    remainder: int
    winner_index: int
    submissions: Dict[str, int]

    def to_dict(self):
        return {
            'total': self.total,
            'participantCount': self.participant_count,
            'remainder': self.remainder,
            'winnerIndex': self.winner_index,
            'submissions': dict(self.submissions),
        }


def winner_index_for(total: int, participant_count: int) -> int:
    """Map ``total`` onto a 0-based seat in the frozen order.

    Remainder 1 picks the first seat, 2 the second, and so on; a
    remainder of 0 wraps around to the last seat.
    """
    remainder = total % participant_count
    return participant_count - 1 if remainder == 0 else remainder - 1


def compute_round_result(order: List[str], submissions: Dict[str, int]) -> RoundResult:
    """Score a completed round.

    ``order`` is the frozen roster (names, join order) and must be
    non-empty; ``submissions`` must hold a value for every name in it.
    """
    n = len(order)
    total = sum(submissions[name] for name in order)
    return RoundResult(
        total=total,
        participant_count=n,
        remainder=total % n,
        winner_index=winner_index_for(total, n),
        submissions=dict(submissions),
    )
