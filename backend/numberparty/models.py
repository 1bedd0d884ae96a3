import copy
import itertools
import time
from typing import Dict, List, Optional

from numberparty.services.rooms.scoring import RoundResult, compute_round_result

PHASE_LOBBY = 'lobby'
PHASE_INPUT = 'input'
PHASE_REVEALED = 'revealed'

# Breaks ties between participants that joined within the same clock tick
_join_seq = itertools.count()


class Participant:
    def __init__(self, name: str, connection_id: str, is_host: bool = False):
        self.name = name
        self.connection_id = connection_id
        self.is_host = is_host
        self.online = True
        self.join_time = time.monotonic()
        self.seq = next(_join_seq)

    @property
    def join_key(self):
        return (self.join_time, self.seq)

    def to_dict(self):
        return {
            'name': self.name,
            'isHost': self.is_host,
            'online': self.online,
        }

    def __repr__(self):
        return f"<Participant {self.name!r} host={self.is_host} online={self.online}>"


class Room:
    """One game session: roster, phase, submissions and the last result.

    Methods report failure by returning False/None and leave the room
    untouched; admission policy and authorization belong to the caller.
    """

    def __init__(self, name: str, min_players: int = 2):
        self.name = name
        self.min_players = min_players
        self.participants: List[Participant] = []
        self.phase = PHASE_LOBBY
        self.frozen_order: List[Participant] = []
        self.submissions: Dict[str, int] = {}
        self.result: Optional[RoundResult] = None
        self.winner: Optional[str] = None

    # ---- roster ----

    def get_participant(self, name: str) -> Optional[Participant]:
        for p in self.participants:
            if p.name == name:
                return p
        return None

    def find_by_connection(self, connection_id: str) -> Optional[Participant]:
        for p in self.participants:
            if p.connection_id == connection_id:
                return p
        return None

    def is_host(self, name: str) -> bool:
        p = self.get_participant(name)
        return bool(p and p.is_host)

    def online_count(self) -> int:
        return sum(1 for p in self.participants if p.online)

    def is_empty(self) -> bool:
        return self.online_count() == 0

    def add_participant(self, name: str, connection_id: str) -> bool:
        """Add or reconnect ``name``. Returns True for a brand-new participant."""
        existing = self.get_participant(name)
        if existing:
            existing.connection_id = connection_id
            existing.online = True
            return False
        self.participants.append(
            Participant(name, connection_id, is_host=len(self.participants) == 0)
        )
        return True

    def remove_participant(self, connection_id: str) -> None:
        participant = self.find_by_connection(connection_id)
        if participant is None:
            return
        participant.online = False
        self._elect_host()

    def mark_offline(self, name: str) -> None:
        """Take ``name`` offline and release its connection."""
        participant = self.get_participant(name)
        if participant is None:
            return
        participant.online = False
        participant.connection_id = None
        self._elect_host()

    def kick_participant(self, name: str) -> Optional[str]:
        participant = self.get_participant(name)
        if participant is None:
            return None
        self.participants.remove(participant)
        self._elect_host()
        return participant.connection_id

    def _elect_host(self) -> None:
        current = next((p for p in self.participants if p.is_host), None)
        if current is not None and current.online:
            return
        for p in self.participants:
            p.is_host = False
        candidates = [p for p in self.participants if p.online] or self.participants
        if candidates:
            min(candidates, key=lambda p: p.join_key).is_host = True

    # ---- round lifecycle ----

    def start_round(self) -> bool:
        if self.phase != PHASE_LOBBY or len(self.participants) < self.min_players:
            return False
        self.phase = PHASE_INPUT
        self.submissions = {}
        self.frozen_order = [copy.copy(p) for p in self.participants]
        self.result = None
        self.winner = None
        return True

    def in_frozen_order(self, name: str) -> bool:
        return any(p.name == name for p in self.frozen_order)

    def submit_number(self, name: str, number) -> bool:
        if self.phase != PHASE_INPUT or not self.in_frozen_order(name):
            return False
        # bool is an int subclass but never a valid pick
        if not isinstance(number, int) or isinstance(number, bool):
            return False
        if not 1 <= number <= len(self.frozen_order):
            return False
        self.submissions[name] = number
        return True

    def can_reveal(self) -> bool:
        return all(p.name in self.submissions for p in self.frozen_order)

    def reveal(self, force: bool = False) -> bool:
        if self.phase != PHASE_INPUT:
            return False
        if force:
            # Absentees count as the minimum pick, not zero
            for p in self.frozen_order:
                self.submissions.setdefault(p.name, 1)
        elif not self.can_reveal():
            return False

        order = [p.name for p in self.frozen_order]
        self.result = compute_round_result(order, self.submissions)
        self.winner = order[self.result.winner_index]
        self.phase = PHASE_REVEALED
        return True

    def back_to_lobby(self) -> bool:
        self.phase = PHASE_LOBBY
        self.submissions = {}
        self.frozen_order = []
        self.result = None
        self.winner = None
        return True

    # ---- projection ----

    def to_dict(self):
        """Client-facing snapshot. Submitted values stay hidden until reveal."""
        revealed = self.phase == PHASE_REVEALED
        return {
            'name': self.name,
            'participants': [p.to_dict() for p in self.participants],
            'phase': self.phase,
            'submissions': {name: True for name in self.submissions} if self.phase == PHASE_INPUT else None,
            'result': self.result.to_dict() if revealed and self.result else None,
            'winner': self.winner if revealed else None,
        }

    def summary(self):
        return {
            'name': self.name,
            'phase': self.phase,
            'participantCount': len(self.participants),
            'onlineCount': self.online_count(),
        }
