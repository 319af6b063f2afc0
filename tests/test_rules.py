import unittest

from engine import Rules
from engine.Topics import Topic, TopicCatalog

CATALOG = TopicCatalog({
    "easy": [
        Topic("Fruits", ("Apple", "Banana", "Cherry")),
        Topic("Colors", ("Red", "Blue")),
    ],
})


def drop(sequence, targetCards, kind=Rules.TABLEAU, source="stack1", target="stack2"):
    return Rules.canDrop(sequence, source, target, kind, targetCards, CATALOG)


class TestSequences(unittest.TestCase):
    def test_topic_card_moves_alone(self):
        self.assertEqual(["Fruits"], Rules.sequenceOf("Fruits", ["Fruits", "Apple"], CATALOG))

    def test_unknown_card_moves_alone(self):
        self.assertEqual(["Mystery"], Rules.sequenceOf("Mystery", ["Mystery", "Apple"], CATALOG))

    def test_run_stops_at_other_topic_or_topic_card(self):
        cards = ["Apple", "Banana", "Red"]
        self.assertEqual(["Apple", "Banana"], Rules.sequenceAt(cards, 0, CATALOG))
        cards = ["Apple", "Banana", "Fruits", "Cherry"]
        self.assertEqual(["Apple", "Banana"], Rules.sequenceAt(cards, 0, CATALOG))
        self.assertEqual([], Rules.sequenceAt(cards, 4, CATALOG))

    def test_draggable_only_when_run_reaches_top(self):
        cards = ["Red", "Apple", "Banana"]
        self.assertFalse(Rules.isDraggable(cards, 0, CATALOG))
        self.assertTrue(Rules.isDraggable(cards, 1, CATALOG))
        self.assertTrue(Rules.isDraggable(cards, 2, CATALOG))
        self.assertFalse(Rules.isDraggable(cards, 3, CATALOG))
        self.assertFalse(Rules.isDraggable(["Apple", "Red", "Banana"], 0, CATALOG))


class TestTopicSlots(unittest.TestCase):
    def test_slot_topic_is_last_topic_card(self):
        self.assertIsNone(Rules.slotTopic([], CATALOG))
        self.assertEqual("Colors", Rules.slotTopic(["Fruits", "Apple", "Banana", "Cherry", "Colors"], CATALOG))

    def test_completion_and_progress(self):
        slot = ["Fruits", "Apple", "Banana"]
        self.assertFalse(Rules.isTopicComplete("Fruits", slot, CATALOG))
        self.assertEqual((2, 3), Rules.topicProgress(slot, CATALOG))
        slot.append("Cherry")
        self.assertTrue(Rules.isTopicComplete("Fruits", slot, CATALOG))
        self.assertEqual((3, 3), Rules.topicProgress(slot, CATALOG))
        self.assertIsNone(Rules.topicProgress(["Apple"], CATALOG))
        self.assertFalse(Rules.isTopicComplete("Nothing", slot, CATALOG))

    def test_topic_card_onto_slot(self):
        self.assertTrue(drop(["Fruits"], [], Rules.TOPIC_SLOT))
        self.assertFalse(drop(["Colors"], ["Fruits", "Apple"], Rules.TOPIC_SLOT))
        self.assertTrue(drop(["Colors"], ["Fruits", "Apple", "Banana", "Cherry"], Rules.TOPIC_SLOT))

    def test_members_onto_slot(self):
        self.assertTrue(drop(["Apple"], ["Fruits"], Rules.TOPIC_SLOT))
        self.assertTrue(drop(["Apple", "Banana"], ["Fruits"], Rules.TOPIC_SLOT))
        self.assertFalse(drop(["Red"], ["Fruits"], Rules.TOPIC_SLOT))
        self.assertFalse(drop(["Apple"], [], Rules.TOPIC_SLOT))
        self.assertFalse(drop(["Apple", "Red"], ["Fruits"], Rules.TOPIC_SLOT))


class TestTableauDrops(unittest.TestCase):
    def test_empty_stack_takes_regular_cards_only(self):
        self.assertTrue(drop(["Apple"], []))
        self.assertTrue(drop(["Apple", "Banana"], []))
        self.assertFalse(drop(["Fruits"], []))

    def test_same_topic_only(self):
        self.assertTrue(drop(["Banana"], ["Red", "Apple"]))
        self.assertFalse(drop(["Red"], ["Apple"]))
        self.assertFalse(drop(["Apple"], ["Fruits"]))
        self.assertFalse(drop(["Fruits"], ["Apple"]))
        self.assertFalse(drop(["Mystery"], ["Apple"]))

    def test_rejects_same_stack_and_unknown_kinds(self):
        self.assertFalse(drop(["Apple"], [], source="stack1", target="stack1"))
        self.assertFalse(drop(["Apple"], [], kind=Rules.WASTE))
        self.assertFalse(drop([], ["Apple"]))


if __name__ == "__main__":
    unittest.main()
