import json
import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DIFFICULTIES = ("easy", "medium", "hard")
DEFAULT_DIFFICULTY = "easy"

MIN_SESSION_TOPICS = 6
MAX_SESSION_TOPICS = 10
MAX_PICK_ATTEMPTS = 50


class CatalogError(Exception):
    pass


def normalizeDifficulty(value) -> str:
    if value is None:
        return DEFAULT_DIFFICULTY
    text = str(value).strip().lower()
    if text in DIFFICULTIES:
        return text
    return DEFAULT_DIFFICULTY


@dataclass(frozen=True)
class Topic:
    name: str
    members: tuple[str, ...]

    @property
    def size(self) -> int:
        """Number of cards the topic occupies when complete (members plus the topic card)."""
        return len(self.members) + 1

    def cards(self) -> tuple[str, ...]:
        return (self.name,) + self.members

    def __contains__(self, card):
        return card == self.name or card in self.members


class TopicCatalog:
    """
    Static topic data grouped by difficulty tier.

    Card-to-topic lookup spans every tier, so names must be unique across the
    whole catalog, not just within one tier.
    """
    DATA_DIR = Path(__file__).with_name("data")

    def __init__(self, tiers: dict):
        self.tiers: dict[str, tuple[Topic, ...]] = {}
        self.topics: dict[str, Topic] = {}
        self.lookup: dict[str, str] = {}
        for tier, topics in tiers.items():
            self.tiers[tier] = tuple(topics)
            for topic in topics:
                self.__register(topic)

    def __register(self, topic: Topic):
        if not topic.name:
            raise CatalogError("topic without a name")
        if topic.name in self.lookup:
            raise CatalogError(f"topic name '{topic.name}' collides with an existing card")
        if topic.name in topic.members:
            raise CatalogError(f"topic '{topic.name}' lists itself as a member")
        if len(set(topic.members)) != len(topic.members):
            raise CatalogError(f"topic '{topic.name}' repeats a member")
        for member in topic.members:
            if member in self.lookup:
                raise CatalogError(
                    f"card '{member}' of '{topic.name}' already belongs to '{self.lookup[member]}'")
        self.topics[topic.name] = topic
        self.lookup[topic.name] = topic.name
        for member in topic.members:
            self.lookup[member] = topic.name

    @staticmethod
    def load(dataDir=None) -> "TopicCatalog":
        path = Path(dataDir) if dataDir is not None else TopicCatalog.DATA_DIR
        tiers = {}
        for tier in DIFFICULTIES:
            file = path / f"{tier}.json"
            if not file.exists():
                tiers[tier] = []
                continue
            try:
                data = json.loads(file.read_text(encoding="utf-8"))
            except ValueError as e:
                raise CatalogError(f"cannot parse {file.name}: {e}") from e
            tiers[tier] = [TopicCatalog.__parseTopic(raw, file.name) for raw in data.get("topics", [])]
        catalog = TopicCatalog(tiers)
        logger.debug("loaded catalog: %s", {k: len(v) for k, v in catalog.tiers.items()})
        return catalog

    @staticmethod
    def __parseTopic(raw, source) -> Topic:
        if not isinstance(raw, dict) or "topic" not in raw:
            raise CatalogError(f"malformed topic entry in {source}: {raw!r}")
        cards = raw.get("cards") or []
        return Topic(name=str(raw["topic"]), members=tuple(str(c) for c in cards))

    def topicOf(self, card) -> Optional[str]:
        return self.lookup.get(card)

    def isTopicCard(self, card) -> bool:
        return card in self.topics

    def getTopic(self, name) -> Optional[Topic]:
        return self.topics.get(name)

    def getTopicsForDifficulty(self, tier) -> tuple[Topic, ...]:
        return self.tiers.get(normalizeDifficulty(tier), ())

    def pickRandomTopic(self, tier, rng=random) -> Optional[Topic]:
        topics = self.getTopicsForDifficulty(tier)
        if not topics:
            return None
        return topics[rng.randrange(len(topics))]

    def allTopics(self):
        return list(self.topics.values())


_DEFAULT_CATALOG = None


def defaultCatalog() -> TopicCatalog:
    global _DEFAULT_CATALOG
    if _DEFAULT_CATALOG is None:
        _DEFAULT_CATALOG = TopicCatalog.load()
    return _DEFAULT_CATALOG


def selectSessionTopics(catalog: TopicCatalog, tier, rng=random, count=None) -> list[Topic]:
    """
    Pick the distinct topics of one session.

    Each of the `count` picks retries up to MAX_PICK_ATTEMPTS times while it keeps
    landing on an already chosen topic; a pick that never escapes the duplicates
    is dropped, so the result may be shorter than requested.
    """
    if count is None:
        count = rng.randint(MIN_SESSION_TOPICS, MAX_SESSION_TOPICS)
    chosen = []
    used = set()
    for _ in range(count):
        topic = catalog.pickRandomTopic(tier, rng)
        attempts = 0
        while topic is not None and topic.name in used and attempts < MAX_PICK_ATTEMPTS:
            topic = catalog.pickRandomTopic(tier, rng)
            attempts += 1
        if topic is not None and topic.name not in used:
            used.add(topic.name)
            chosen.append(topic)
    if len(chosen) < count:
        logger.warning("catalog exhausted for tier %s: wanted %d topics, got %d",
                       normalizeDifficulty(tier), count, len(chosen))
    return chosen
