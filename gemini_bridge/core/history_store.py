from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Literal, Optional

Role = Literal["user", "ai"]


@dataclass(frozen=True)
class Turn:
    role: Role
    message: str


class HistoryStore:
    """
    In-memory conversation store.
    Structure:
    sender_id -> turns[]

    Lives for the process lifetime, nothing is persisted.
    """

    def __init__(self, max_turns: Optional[int] = None):
        if max_turns is not None and max_turns < 1:
            raise ValueError("max_turns must be >= 1 or None")
        self.store: Dict[str, List[Turn]] = defaultdict(list)
        self.max_turns = max_turns

    def get(self, sender_id: str) -> List[Turn]:
        return self.store[sender_id]

    def append(self, sender_id: str, turn: Turn) -> None:
        turns = self.store[sender_id]
        turns.append(turn)

        if self.max_turns is not None:
            self.store[sender_id] = self._trim(turns)

    def _trim(self, turns: List[Turn]) -> List[Turn]:
        # max_turns counts user messages (each with its reply, if any);
        # the kept history always starts on a user turn
        users = sum(1 for t in turns if t.role == "user")
        start = 0
        while start < len(turns) and (users > self.max_turns or turns[start].role != "user"):
            if turns[start].role == "user":
                users -= 1
            start += 1
        return turns[start:] if start else turns

    def add_user_message(self, sender_id: str, message: str) -> None:
        self.append(sender_id, Turn(role="user", message=message))

    def add_ai_message(self, sender_id: str, message: str) -> None:
        self.append(sender_id, Turn(role="ai", message=message))

    def clear(self, sender_id: str) -> None:
        self.store.pop(sender_id, None)

    def senders(self) -> List[str]:
        return list(self.store)

    def __len__(self) -> int:
        return len(self.store)
