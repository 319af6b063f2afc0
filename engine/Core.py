import logging
import math
import random
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from engine import Rules
from engine.Deal import TABLEAU_COUNT, dealTopics
from engine.Gesture import SAFETY_TIMEOUT, GestureGuard, GestureSession
from engine.Topics import DEFAULT_DIFFICULTY, Topic, TopicCatalog, defaultCatalog, normalizeDifficulty, \
    selectSessionTopics

logger = logging.getLogger(__name__)

TOPIC_SLOT_COUNT = 4
TOPIC_SLOT_IDS = tuple(f"topic{i + 1}" for i in range(TOPIC_SLOT_COUNT))
TABLEAU_IDS = tuple(f"stack{i + 1}" for i in range(TABLEAU_COUNT))
WASTE_ID = "waste"

MOVE_MULTIPLIERS = {"easy": 2.5, "medium": 2.2, "hard": 2.0}
MIN_MOVES = 75
# seconds a completed topic stays on its slot before it is cleared
TOPIC_CLEAR_DELAY = 0.6


def initialMoveBudget(totalCards, difficulty):
    multiplier = MOVE_MULTIPLIERS[normalizeDifficulty(difficulty)]
    return max(math.floor(totalCards * multiplier), MIN_MOVES)


class GameError(Exception):
    pass


class GameStatus(Enum):
    PLAYING = "playing"
    WON = "won"
    LOST = "lost"


@dataclass
class Stack:
    id: str
    kind: str
    cards: list = field(default_factory=list)

    def top(self):
        if len(self.cards) == 0:
            return None
        return self.cards[len(self.cards) - 1]

    def __len__(self):
        return len(self.cards)


class Board:
    def __init__(self):
        self.topicSlots = [Stack(sid, Rules.TOPIC_SLOT) for sid in TOPIC_SLOT_IDS]
        self.tableau = [Stack(sid, Rules.TABLEAU) for sid in TABLEAU_IDS]
        self.waste = Stack(WASTE_ID, Rules.WASTE)
        self.drawPile = []

    def stacks(self):
        return self.topicSlots + self.tableau + [self.waste]

    def stack(self, stackId) -> Optional[Stack]:
        for stack in self.stacks():
            if stack.id == stackId:
                return stack
        return None

    def cardCount(self):
        return len(self.drawPile) + sum(len(stack) for stack in self.stacks())

    @staticmethod
    def fromDeal(deal):
        board = Board()
        for stack, cards in zip(board.tableau, deal.tableau):
            stack.cards = list(cards)
        board.drawPile = list(deal.drawPile)
        return board


class GameConfig:
    def __init__(self, difficulty=DEFAULT_DIFFICULTY, seed=None, topicCount=None):
        self.difficulty = normalizeDifficulty(difficulty)
        self.seed = seed
        self.topicCount = topicCount
        self.clearDelay = TOPIC_CLEAR_DELAY
        self.gestureTimeout = SAFETY_TIMEOUT


class GameEvent:
    def isAuto(self) -> bool:
        """Auto events follow from another event instead of a player action."""
        return False


class CardDrawn(GameEvent):
    def __init__(self, card):
        self.card = card


class CardsReturned(GameEvent):
    def __init__(self, count: int):
        self.count = count


class CardsMoved(GameEvent):
    def __init__(self, cards: tuple, src: str, dest: str):
        self.cards = cards
        self.src = src
        self.dest = dest


class TopicCompleted(GameEvent):
    def __init__(self, slotId, topic):
        self.slotId = slotId
        self.topic = topic

    def isAuto(self):
        return True


class TopicCleared(GameEvent):
    def __init__(self, slotId, cards: tuple):
        self.slotId = slotId
        self.cards = cards

    def isAuto(self):
        return True


class MoveCountChanged(GameEvent):
    def __init__(self, movesLeft: int):
        self.movesLeft = movesLeft

    def isAuto(self):
        return True


class StatusChanged(GameEvent):
    def __init__(self, status: GameStatus):
        self.status = status

    def isAuto(self):
        return True


class DeferredAction:
    def __init__(self, key, dueAt: float, action: Callable[[], None]):
        self.key = key
        self.dueAt = dueAt
        self.action = action

    def run(self):
        self.action()


class DeferredActions:
    """Pending actions keyed by id; scheduling under an existing key replaces it."""

    def __init__(self):
        self.pending: dict = {}

    def schedule(self, key, dueAt, action):
        self.pending[key] = DeferredAction(key, dueAt, action)

    def isPending(self, key):
        return key in self.pending

    def cancel(self, key) -> bool:
        return self.pending.pop(key, None) is not None

    def cancelAll(self):
        self.pending.clear()

    def popDue(self, now) -> list:
        due = sorted((a for a in self.pending.values() if a.dueAt <= now), key=lambda a: a.dueAt)
        for action in due:
            del self.pending[action.key]
        return due

    def __len__(self):
        return len(self.pending)


class Core:
    """
    ask*** : should be called by the presentation layer; validates and returns whether it happened.
    do*** : actual operation, no validation.
    """

    def __init__(self, catalog: TopicCatalog = None, clock=time.monotonic):
        self.interface = None
        self.catalog = catalog if catalog is not None else defaultCatalog()
        self.clock = clock

        self.config = GameConfig()
        self.rng = random.Random()
        self.board = Board()
        self.topics: list[Topic] = []
        self.totalCards = 0
        self.cleared = []  # cards of topics already removed from the board
        self.movesLeft = 0
        self.status = GameStatus.PLAYING
        self.gameStarted = False
        self.lockedSlots = set()

        self.deferred = DeferredActions()
        self.gesture = GestureGuard()

    def registerInterface(self, interface):
        self.interface = interface
        interface.core = self

    def startGame(self, config: GameConfig = None):
        if self.interface is None:
            raise GameError("no interface registered")
        config = config if config is not None else GameConfig()
        self.__reset(config)
        self.rng = random.Random(config.seed)
        topics = selectSessionTopics(self.catalog, config.difficulty, self.rng, config.topicCount)
        deal = dealTopics(topics, self.catalog, self.rng)
        self.__install(Board.fromDeal(deal), topics, None)
        logger.info("new %s game: %d topics, %d cards, %d moves",
                    config.difficulty, len(self.topics), self.totalCards, self.movesLeft)
        self.interface.onStart()

    def loadBoard(self, tableau, drawPile=(), waste=(), topicSlots=None, topics=None,
                  config: GameConfig = None, movesLeft=None):
        """Install an explicit position instead of dealing one."""
        if len(tableau) != TABLEAU_COUNT:
            raise GameError(f"expected {TABLEAU_COUNT} tableau stacks, got {len(tableau)}")
        if topicSlots is not None and len(topicSlots) != TOPIC_SLOT_COUNT:
            raise GameError(f"expected {TOPIC_SLOT_COUNT} topic slots, got {len(topicSlots)}")
        config = config if config is not None else GameConfig()
        self.__reset(config)
        self.rng = random.Random(config.seed)

        board = Board()
        for stack, cards in zip(board.tableau, tableau):
            stack.cards = list(cards)
        for stack, cards in zip(board.topicSlots, topicSlots or [[]] * TOPIC_SLOT_COUNT):
            stack.cards = list(cards)
        board.drawPile = list(drawPile)
        board.waste.cards = list(waste)

        if topics is None:
            names = {self.catalog.topicOf(card) for stack in board.stacks() for card in stack.cards}
            names.update(self.catalog.topicOf(card) for card in board.drawPile)
            names.discard(None)
            topics = sorted(names)
        resolved = []
        for topic in topics:
            data = topic if isinstance(topic, Topic) else self.catalog.getTopic(topic)
            if data is None:
                raise GameError(f"unknown topic '{topic}'")
            resolved.append(data)
        self.__install(board, resolved, movesLeft)
        for slot in board.topicSlots:
            self.__checkCompletion(slot.id)

    def __reset(self, config: GameConfig):
        self.config = config
        self.deferred.cancelAll()
        self.gesture.cancel()
        self.gesture.timeout = config.gestureTimeout

    def __install(self, board: Board, topics, movesLeft):
        self.board = board
        self.topics = list(topics)
        self.totalCards = board.cardCount()
        self.cleared = []
        self.movesLeft = initialMoveBudget(self.totalCards, self.config.difficulty) if movesLeft is None else movesLeft
        self.status = GameStatus.PLAYING
        self.gameStarted = any(len(stack) > 0 for stack in board.tableau)
        self.lockedSlots = set()

    # ---------------------------------------------------------------- queries

    def isPlaying(self):
        return self.status == GameStatus.PLAYING

    def stack(self, stackId) -> Optional[Stack]:
        return self.board.stack(stackId)

    def topicOf(self, card):
        return self.catalog.topicOf(card)

    def isTopicCard(self, card):
        return self.catalog.isTopicCard(card)

    def isSlotLocked(self, slotId):
        return slotId in self.lockedSlots

    def isDraggable(self, stackId, idx):
        stack = self.stack(stackId)
        if stack is None or stack.kind == Rules.TOPIC_SLOT:
            return False
        if stack.kind == Rules.WASTE:
            return 0 <= idx == len(stack) - 1
        return Rules.isDraggable(stack.cards, idx, self.catalog)

    def sequenceAt(self, stackId, idx) -> list:
        """The cards a drag starting at (stackId, idx) would carry; empty when nothing can be lifted."""
        if not self.isDraggable(stackId, idx):
            return []
        stack = self.stack(stackId)
        if stack.kind == Rules.WASTE:
            return [stack.cards[idx]]
        return Rules.sequenceAt(stack.cards, idx, self.catalog)

    def canMove(self, cards, src, dest) -> bool:
        if not self.isPlaying():
            return False
        target = self.stack(dest)
        if target is None or target.kind == Rules.WASTE:
            return False
        if dest in self.lockedSlots:
            return False
        return Rules.canDrop(cards, src, dest, target.kind, target.cards, self.catalog)

    def legalMoves(self) -> list:
        moves = []
        for source in self.board.tableau + [self.board.waste]:
            for idx in range(len(source)):
                cards = self.sequenceAt(source.id, idx)
                if not cards:
                    continue
                for target in self.board.topicSlots + self.board.tableau:
                    if self.canMove(cards, source.id, target.id):
                        moves.append((source.id, idx, target.id))
        return moves

    def existValidMove(self):
        if not self.isPlaying():
            return False
        if self.board.drawPile or self.board.waste.cards:
            return True
        return len(self.legalMoves()) > 0

    def outstandingCards(self):
        """Cards not yet resting in a completed topic slot."""
        settled = sum(len(slot) for slot in self.board.topicSlots if slot.id in self.lockedSlots)
        return self.board.cardCount() - settled

    def accountedCards(self):
        return self.board.cardCount() + len(self.cleared)

    def isWon(self):
        if not self.gameStarted or self.totalCards == 0 or len(self.topics) == 0:
            return False
        board = self.board
        return (len(board.drawPile) == 0 and len(board.waste) == 0
                and all(len(s) == 0 for s in board.tableau)
                and all(len(s) == 0 for s in board.topicSlots))

    # -------------------------------------------------------- player actions

    def askDraw(self) -> bool:
        if not self.isPlaying() or len(self.board.drawPile) == 0:
            return False
        self.doDraw()
        self.__afterAction()
        return True

    def askReshuffle(self) -> bool:
        if not self.isPlaying() or len(self.board.drawPile) > 0 or len(self.board.waste) == 0:
            return False
        self.doReshuffle()
        self.__afterAction()
        return True

    def askMove(self, src, idx, dest) -> bool:
        cards = self.sequenceAt(src, idx)
        if not cards or not self.canMove(cards, src, dest):
            logger.debug("rejected move %s[%d] -> %s", src, idx, dest)
            return False
        self.doMove(cards, src, dest)
        self.__afterAction(dest)
        return True

    def askBeginDrag(self, src, idx) -> Optional[GestureSession]:
        if not self.isPlaying():
            return None
        cards = self.sequenceAt(src, idx)
        if not cards:
            return None
        return self.gesture.begin(src, idx, cards, self.clock())

    def askDrop(self, dest, token=None) -> bool:
        """
        Commit the open drag onto `dest`.

        A None destination (release outside every stack) and any illegal target
        just close the gesture; the cards stay where they were.
        """
        session = self.gesture.finish(token)
        if session is None:
            return False
        if dest is None:
            logger.debug("drop from %s outside any stack", session.source)
            return False
        if self.sequenceAt(session.source, session.index) != list(session.cards):
            logger.debug("stale drag from %s ignored", session.source)
            return False
        return self.askMove(session.source, session.index, dest)

    def askCancelDrag(self):
        self.gesture.cancel()

    def tick(self, now=None) -> int:
        """Run deferred work that is due; returns how many actions fired."""
        if now is None:
            now = self.clock()
        self.gesture.expire(now)
        fired = 0
        for action in self.deferred.popDue(now):
            action.run()
            fired += 1
        return fired

    # ------------------------------------------------------------ mutations

    def doDraw(self):
        card = self.board.drawPile.pop(0)
        self.board.waste.cards.append(card)
        self.__emit(CardDrawn(card))

    def doReshuffle(self):
        cards = list(self.board.waste.cards)
        self.rng.shuffle(cards)
        self.board.drawPile = cards
        self.board.waste.cards = []
        self.__emit(CardsReturned(len(cards)))

    def doMove(self, cards, src, dest):
        source = self.stack(src)
        target = self.stack(dest)
        source.cards = [card for card in source.cards if card not in cards]
        target.cards.extend(cards)
        self.__emit(CardsMoved(tuple(cards), src, dest))

    def doClearTopic(self, slotId):
        slot = self.stack(slotId)
        cards = tuple(slot.cards)
        slot.cards = []
        self.cleared.extend(cards)
        self.lockedSlots.discard(slotId)
        self.__emit(TopicCleared(slotId, cards))
        self.checkStatus()

    def checkStatus(self) -> GameStatus:
        if not self.isPlaying():
            return self.status
        if self.movesLeft <= 0:
            if self.movesLeft == 0 and self.totalCards == 0:
                return self.status
            if self.outstandingCards() > 0:
                self.__finish(GameStatus.LOST)
                return self.status
        if self.isWon():
            self.__finish(GameStatus.WON)
        return self.status

    def __afterAction(self, dest=None):
        self.movesLeft -= 1
        self.__emit(MoveCountChanged(self.movesLeft))
        if dest in TOPIC_SLOT_IDS:
            self.__checkCompletion(dest)
        self.checkStatus()

    def __checkCompletion(self, slotId):
        if slotId in self.lockedSlots:
            return
        slot = self.stack(slotId)
        topic = Rules.slotTopic(slot.cards, self.catalog)
        if topic is None or not Rules.isTopicComplete(topic, slot.cards, self.catalog):
            return
        self.lockedSlots.add(slotId)
        self.deferred.schedule(slotId, self.clock() + self.config.clearDelay,
                               lambda: self.doClearTopic(slotId))
        logger.debug("topic %s complete on %s", topic, slotId)
        self.__emit(TopicCompleted(slotId, topic))

    def __finish(self, status: GameStatus):
        self.status = status
        self.deferred.cancelAll()
        self.gesture.cancel()
        logger.info("game %s with %d moves left", status.value, self.movesLeft)
        self.__emit(StatusChanged(status))
        if self.interface is None:
            return
        if status == GameStatus.WON:
            self.interface.onWin()
        else:
            self.interface.onLose()

    def __emit(self, event: GameEvent):
        if self.interface is not None:
            self.interface.onEvent(event)
