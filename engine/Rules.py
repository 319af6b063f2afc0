"""
Move validation for topic solitaire.

All functions are pure: they look at card lists and the catalog, never at a
running session. The session controller layers its own checks (game status,
slots locked while a completed topic waits to be cleared) on top of these.
"""
from typing import Optional

from engine.Topics import TopicCatalog

TOPIC_SLOT = "topic-slot"
TABLEAU = "tableau"
WASTE = "waste"


def sequenceOf(card, cards, catalog: TopicCatalog) -> list:
    """
    The run that travels with `card` when it is dragged out of `cards`.

    A topic card, or a card without a topic, always moves alone. Otherwise the
    run extends towards the top while the following cards share the topic and
    are not topic cards themselves.
    """
    topic = catalog.topicOf(card)
    if topic is None or catalog.isTopicCard(card) or card not in cards:
        return [card]
    idx = cards.index(card)
    sequence = [card]
    for follower in cards[idx + 1:]:
        if catalog.topicOf(follower) != topic or catalog.isTopicCard(follower):
            break
        sequence.append(follower)
    return sequence


def sequenceAt(cards, idx, catalog: TopicCatalog) -> list:
    if idx < 0 or idx >= len(cards):
        return []
    return sequenceOf(cards[idx], cards, catalog)


def isDraggable(cards, idx, catalog: TopicCatalog) -> bool:
    """A card can be lifted when it is the top card or heads a run ending at the top."""
    if idx < 0 or idx >= len(cards):
        return False
    if idx == len(cards) - 1:
        return True
    return idx + len(sequenceAt(cards, idx, catalog)) == len(cards)


def slotTopic(cards, catalog: TopicCatalog) -> Optional[str]:
    topicCards = [card for card in cards if catalog.isTopicCard(card)]
    if not topicCards:
        return None
    return topicCards[-1]


def isTopicComplete(topic, cards, catalog: TopicCatalog) -> bool:
    data = catalog.getTopic(topic)
    if data is None:
        return False
    resident = [card for card in cards if card in data]
    return len(resident) == len(data.members) + 1


def topicProgress(cards, catalog: TopicCatalog) -> Optional[tuple[int, int]]:
    """(collected members, members needed) of the slot's topic, None without a topic card."""
    topic = slotTopic(cards, catalog)
    if topic is None:
        return None
    data = catalog.getTopic(topic)
    collected = [card for card in cards if card in data.members]
    return len(collected), len(data.members)


def canDrop(sequence, sourceId, targetId, targetKind, targetCards, catalog: TopicCatalog) -> bool:
    if not sequence or targetId == sourceId:
        return False
    if targetKind == TOPIC_SLOT:
        return _canDropOnSlot(sequence, targetCards, catalog)
    if targetKind == TABLEAU:
        return _canDropOnTableau(sequence, targetCards, catalog)
    return False


def _canDropOnSlot(sequence, targetCards, catalog):
    existing = slotTopic(targetCards, catalog)
    if len(sequence) == 1 and catalog.isTopicCard(sequence[0]):
        if existing is None:
            return True
        return isTopicComplete(existing, targetCards, catalog)
    if existing is None:
        return False
    data = catalog.getTopic(existing)
    return all(card in data for card in sequence)


def _canDropOnTableau(sequence, targetCards, catalog):
    if not targetCards:
        return not any(catalog.isTopicCard(card) for card in sequence)
    top = targetCards[-1]
    first = sequence[0]
    if catalog.isTopicCard(top) or catalog.isTopicCard(first):
        return False
    topic = catalog.topicOf(first)
    if topic is None or catalog.topicOf(top) != topic:
        return False
    return all(catalog.topicOf(card) == topic and not catalog.isTopicCard(card) for card in sequence)
