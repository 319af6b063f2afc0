import json
import random
import tempfile
import unittest
from pathlib import Path

from engine.Topics import (
    CatalogError,
    Topic,
    TopicCatalog,
    defaultCatalog,
    normalizeDifficulty,
    selectSessionTopics,
)


class TestBundledCatalog(unittest.TestCase):
    def test_every_tier_has_topics(self):
        catalog = defaultCatalog()
        for tier in ("easy", "medium", "hard"):
            topics = catalog.getTopicsForDifficulty(tier)
            self.assertGreaterEqual(len(topics), 10)
            self.assertTrue(all(len(topic.members) >= 2 for topic in topics))

    def test_lookup_spans_tiers(self):
        catalog = defaultCatalog()
        self.assertEqual("Fruits", catalog.topicOf("Apple"))
        self.assertEqual("Planets", catalog.topicOf("Mars"))
        self.assertTrue(catalog.isTopicCard("Fruits"))
        self.assertFalse(catalog.isTopicCard("Apple"))
        self.assertIsNone(catalog.topicOf("Nothing"))

    def test_difficulty_normalisation(self):
        self.assertEqual("hard", normalizeDifficulty(" HARD "))
        self.assertEqual("easy", normalizeDifficulty(None))
        self.assertEqual("easy", normalizeDifficulty("impossible"))
        self.assertEqual(defaultCatalog().getTopicsForDifficulty("easy"),
                         defaultCatalog().getTopicsForDifficulty("bogus"))


class TestCatalogValidation(unittest.TestCase):
    def test_member_shared_between_topics(self):
        with self.assertRaises(CatalogError):
            TopicCatalog({"easy": [Topic("A", ("x", "y")), Topic("B", ("y", "z"))]})

    def test_member_named_like_a_topic(self):
        with self.assertRaises(CatalogError):
            TopicCatalog({"easy": [Topic("A", ("x",))], "hard": [Topic("B", ("A",))]})

    def test_topic_listing_itself(self):
        with self.assertRaises(CatalogError):
            TopicCatalog({"easy": [Topic("A", ("A", "x"))]})

    def test_load_from_directory(self):
        with tempfile.TemporaryDirectory() as tmp:
            data = {"tier": "easy", "topics": [{"topic": "Shapes", "cards": ["Circle", "Square"]}]}
            Path(tmp, "easy.json").write_text(json.dumps(data), encoding="utf-8")
            catalog = TopicCatalog.load(tmp)
        self.assertEqual(("Circle", "Square"), catalog.getTopic("Shapes").members)
        self.assertEqual((), catalog.getTopicsForDifficulty("medium"))

    def test_malformed_files(self):
        with tempfile.TemporaryDirectory() as tmp:
            Path(tmp, "easy.json").write_text("{not json", encoding="utf-8")
            with self.assertRaises(CatalogError):
                TopicCatalog.load(tmp)
            Path(tmp, "easy.json").write_text(json.dumps({"topics": [{"cards": ["x"]}]}), encoding="utf-8")
            with self.assertRaises(CatalogError):
                TopicCatalog.load(tmp)


class TestSessionTopics(unittest.TestCase):
    def test_random_count_and_distinct(self):
        catalog = defaultCatalog()
        for seed in range(20):
            topics = selectSessionTopics(catalog, "medium", random.Random(seed))
            names = [topic.name for topic in topics]
            self.assertTrue(6 <= len(names) <= 10)
            self.assertEqual(len(names), len(set(names)))
            self.assertTrue(all(catalog.getTopic(n) in catalog.getTopicsForDifficulty("medium") for n in names))

    def test_exhausted_catalog_returns_fewer(self):
        catalog = TopicCatalog({"easy": [Topic("A", ("a1", "a2")), Topic("B", ("b1", "b2"))]})
        with self.assertLogs("engine.Topics", level="WARNING"):
            topics = selectSessionTopics(catalog, "easy", random.Random(1), count=5)
        self.assertEqual({"A", "B"}, {topic.name for topic in topics})

    def test_empty_tier(self):
        catalog = TopicCatalog({"easy": []})
        with self.assertLogs("engine.Topics", level="WARNING"):
            self.assertEqual([], selectSessionTopics(catalog, "easy", random.Random(1), count=6))


if __name__ == "__main__":
    unittest.main()
