from engine import Rules
from engine.Core import (
    CardDrawn,
    CardsMoved,
    CardsReturned,
    Core,
    GameEvent,
    MoveCountChanged,
    Stack,
    StatusChanged,
    TopicCleared,
    TopicCompleted,
)
from modern_ui.view_model import AnimationEvent, CardView, GameViewModel, StackView


class CoreAdapter:
    """Bridges the Core state/events to a renderer-friendly model."""

    @staticmethod
    def stack_view(core: Core, stack: Stack) -> StackView:
        cards = tuple(
            CardView(
                name=card,
                topic=core.topicOf(card),
                is_topic=core.isTopicCard(card),
                draggable=core.isDraggable(stack.id, idx),
            )
            for idx, card in enumerate(stack.cards)
        )
        if stack.kind != Rules.TOPIC_SLOT:
            return StackView(id=stack.id, kind=stack.kind, cards=cards)
        return StackView(
            id=stack.id,
            kind=stack.kind,
            cards=cards,
            topic=Rules.slotTopic(stack.cards, core.catalog),
            progress=Rules.topicProgress(stack.cards, core.catalog),
            locked=core.isSlotLocked(stack.id),
        )

    @staticmethod
    def snapshot(core: Core) -> GameViewModel:
        board = core.board
        return GameViewModel(
            difficulty=core.config.difficulty,
            moves_left=core.movesLeft,
            status=core.status.value,
            deck_count=len(board.drawPile),
            waste=CoreAdapter.stack_view(core, board.waste),
            slots=tuple(CoreAdapter.stack_view(core, slot) for slot in board.topicSlots),
            tableau=tuple(CoreAdapter.stack_view(core, stack) for stack in board.tableau),
            topics_total=len(core.topics),
            topics_cleared=sum(1 for card in core.cleared if core.isTopicCard(card)),
        )

    @staticmethod
    def event_to_animation(event: GameEvent) -> AnimationEvent:
        if isinstance(event, CardsMoved):
            return AnimationEvent(
                type="MOVE",
                payload={"src": event.src, "dest": event.dest, "count": len(event.cards)},
            )
        if isinstance(event, CardDrawn):
            return AnimationEvent(type="DRAW", payload={"card": event.card})
        if isinstance(event, CardsReturned):
            return AnimationEvent(type="RECYCLE", payload={"count": event.count})
        if isinstance(event, TopicCompleted):
            return AnimationEvent(
                type="TOPIC_COMPLETE",
                payload={"slot": event.slotId, "topic": event.topic},
            )
        if isinstance(event, TopicCleared):
            return AnimationEvent(
                type="TOPIC_CLEAR",
                payload={"slot": event.slotId, "count": len(event.cards)},
            )
        if isinstance(event, MoveCountChanged):
            return AnimationEvent(type="MOVES", payload={"moves_left": event.movesLeft})
        if isinstance(event, StatusChanged):
            return AnimationEvent(type="STATUS", payload={"status": event.status.value})
        return AnimationEvent(type="UNKNOWN", payload={"event": type(event).__name__})
