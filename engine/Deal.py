import logging
import random
from dataclasses import dataclass, field

from engine.Topics import Topic, TopicCatalog

logger = logging.getLogger(__name__)

TABLEAU_COUNT = 4
BASE_VISIBLE_SIZES = (2, 3, 4, 5)
WINNABLE_STACK_SIZES = (2, 3, 3, 4)
TOPIC_SEED_CHANCE = 0.5
# a topic card is only pulled forward when the deck is deep enough to hide it
MIN_DECK_FOR_TOPIC_PULL = 10


@dataclass
class DealResult:
    tableau: list = field(default_factory=lambda: [[] for _ in range(TABLEAU_COUNT)])
    drawPile: list = field(default_factory=list)

    def cardCount(self):
        return len(self.drawPile) + sum(len(stack) for stack in self.tableau)


def unique(cards):
    return list(dict.fromkeys(cards))


def shuffled(cards, rng=random):
    result = list(cards)
    rng.shuffle(result)
    return result


def generateVisibleCounts(rng=random):
    counts = [max(1, size + rng.randrange(2) - 1) for size in BASE_VISIBLE_SIZES]
    rng.shuffle(counts)
    return counts


def dealTopics(topics: list[Topic], catalog: TopicCatalog, rng=random) -> DealResult:
    allCards = [card for topic in topics for card in topic.members]
    topicCards = [topic.name for topic in topics if topic.name]
    return distributeCards(allCards, topicCards, catalog, rng)


def distributeCards(allCards, topicCards, catalog: TopicCatalog, rng=random) -> DealResult:
    """
    Build the opening tableau and draw pile.

    Without any topic card the regular cards are spread with jittered stack
    sizes; otherwise the winnable setup is used.
    """
    topicCards = unique(topicCards)
    regularCards = [card for card in unique(allCards) if card not in topicCards]

    if not topicCards:
        pool = shuffled(regularCards, rng)
        counts = generateVisibleCounts(rng)
        result = DealResult()
        cardIndex = 0
        for i in range(TABLEAU_COUNT):
            for _ in range(counts[i]):
                if cardIndex >= len(pool):
                    break
                result.tableau[i].append(pool[cardIndex])
                cardIndex += 1
        result.drawPile = pool[cardIndex:]
        return result

    return createWinnableSetup(topicCards, regularCards, catalog, rng)


def createWinnableSetup(topicCards, regularCards, catalog: TopicCatalog, rng=random) -> DealResult:
    stacks = [[] for _ in range(TABLEAU_COUNT)]
    topics = shuffled(topicCards, rng)
    regulars = shuffled(regularCards, rng)
    shouldPlaceTopic = rng.random() < TOPIC_SEED_CHANCE
    topicPlaced = False

    for stackIndex, targetSize in enumerate(WINNABLE_STACK_SIZES):
        for cardIndex in range(targetSize):
            card = None
            if (shouldPlaceTopic and not topicPlaced and stackIndex == TABLEAU_COUNT - 1
                    and cardIndex == targetSize - 1 and topics):
                card = topics.pop(0)
                topicPlaced = True
            elif regulars:
                card = regulars.pop(0)
            if card is not None:
                stacks[stackIndex].append(card)

    deck = shuffled(topics + regulars, rng)
    return ensureWinnableSetup(stacks, deck, topicCards, catalog)


def ensureWinnableSetup(stacks, deck, topicCards, catalog: TopicCatalog) -> DealResult:
    topicSet = set(topicCards)

    if not any(stacks) and deck:
        stacks[0].append(deck.pop(0))

    accessibleTopic = any(card in topicSet for stack in stacks for card in stack[-2:])
    if not accessibleTopic and len(deck) > MIN_DECK_FOR_TOPIC_PULL:
        found = next((i for i, card in enumerate(deck) if card in topicSet), -1)
        if found >= 0:
            topic = deck.pop(found)
            if any(topic in stack for stack in stacks):
                deck.append(topic)
            else:
                shortest = min(range(len(stacks)), key=lambda i: len(stacks[i]))
                stacks[shortest].append(topic)

    moved = separateTopicRelatedCards(stacks, catalog)

    placed = {card for stack in stacks for card in stack if card in topicSet}
    deck = [card for card in deck if card not in topicSet or card not in placed]

    logger.debug("deal: stacks=%s deck=%d relocated=%d",
                 [len(stack) for stack in stacks], len(deck), moved)
    return DealResult(tableau=stacks, drawPile=deck)


def _isSameTopicRegularPair(lower, upper, catalog):
    topic = catalog.topicOf(lower)
    return (topic is not None and topic == catalog.topicOf(upper)
            and lower != topic and upper != topic)


def separateTopicRelatedCards(stacks, catalog: TopicCatalog) -> int:
    """
    Break up adjacent regular cards of the same topic.

    Conflicts are collected first and resolved from the last one backwards so
    earlier indices stay valid. Returns the number of relocated cards.
    """
    conflicts = []
    for stackIndex, stack in enumerate(stacks):
        for cardIndex in range(len(stack) - 1):
            if _isSameTopicRegularPair(stack[cardIndex], stack[cardIndex + 1], catalog):
                conflicts.append((stackIndex, cardIndex + 1))

    moved = 0
    for stackIndex, cardIndex in reversed(conflicts):
        stack = stacks[stackIndex]
        if cardIndex >= len(stack):
            continue
        card = stack.pop(cardIndex)
        cardTopic = catalog.topicOf(card)

        best = -1
        minSize = None
        for j, target in enumerate(stacks):
            if j == stackIndex:
                continue
            hasConflict = bool(target) and catalog.topicOf(target[-1]) == cardTopic and target[-1] != cardTopic
            if not hasConflict and (minSize is None or len(target) < minSize):
                best = j
                minSize = len(target)

        if best == -1:
            for j, target in enumerate(stacks):
                if j != stackIndex and (minSize is None or len(target) < minSize):
                    best = j
                    minSize = len(target)

        if best == -1:
            best = (stackIndex + 1) % len(stacks)
        stacks[best].append(card)
        moved += 1
    return moved
