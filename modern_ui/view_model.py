from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CardView:
    name: str
    topic: Optional[str]
    is_topic: bool
    draggable: bool


@dataclass(frozen=True)
class StackView:
    id: str
    kind: str
    cards: tuple[CardView, ...]
    # topic slots only
    topic: Optional[str] = None
    progress: Optional[tuple[int, int]] = None
    locked: bool = False


@dataclass(frozen=True)
class GameViewModel:
    difficulty: str
    moves_left: int
    status: str
    deck_count: int
    waste: StackView
    slots: tuple[StackView, ...]
    tableau: tuple[StackView, ...]
    topics_total: int
    topics_cleared: int

    def stack(self, stack_id) -> Optional[StackView]:
        for stack in self.slots + self.tableau + (self.waste,):
            if stack.id == stack_id:
                return stack
        return None


@dataclass(frozen=True)
class AnimationEvent:
    type: str
    payload: dict
