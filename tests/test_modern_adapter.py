import unittest

from engine.Core import (
    CardDrawn,
    CardsMoved,
    CardsReturned,
    Core,
    GameStatus,
    MoveCountChanged,
    StatusChanged,
    TopicCleared,
    TopicCompleted,
)
from engine.Interface import Interface
from engine.Topics import Topic, TopicCatalog
from modern_ui.adapter import CoreAdapter


def loaded_core():
    catalog = TopicCatalog({
        "easy": [
            Topic("Fruits", ("Apple", "Banana")),
            Topic("Colors", ("Red", "Blue")),
        ],
    })
    core = Core(catalog=catalog, clock=lambda: 0.0)
    core.registerInterface(Interface())
    core.loadBoard(
        [["Red", "Banana"], ["Colors"], [], []],
        topicSlots=[["Fruits", "Apple"], [], [], []],
        drawPile=["Blue"],
        waste=[],
        movesLeft=30,
    )
    return core


class ModernAdapterTestCase(unittest.TestCase):
    def test_snapshot_loaded_core(self):
        core = loaded_core()
        vm = CoreAdapter.snapshot(core)

        self.assertEqual(30, vm.moves_left)
        self.assertEqual("playing", vm.status)
        self.assertEqual(1, vm.deck_count)
        self.assertEqual(4, len(vm.slots))
        self.assertEqual(4, len(vm.tableau))
        self.assertEqual(2, vm.topics_total)
        self.assertEqual(0, vm.topics_cleared)

        slot = vm.stack("topic1")
        self.assertEqual("Fruits", slot.topic)
        self.assertEqual((1, 2), slot.progress)
        self.assertFalse(slot.locked)

        stack1 = vm.stack("stack1")
        self.assertEqual(["Red", "Banana"], [c.name for c in stack1.cards])
        self.assertEqual([False, True], [c.draggable for c in stack1.cards])
        self.assertEqual("Fruits", stack1.cards[1].topic)
        self.assertTrue(vm.stack("stack2").cards[0].is_topic)
        self.assertIsNone(vm.stack("topic2").progress)

    def test_snapshot_after_completion_and_clear(self):
        core = loaded_core()
        self.assertTrue(core.askMove("stack1", 1, "topic1"))
        vm = CoreAdapter.snapshot(core)
        self.assertTrue(vm.stack("topic1").locked)
        self.assertEqual((2, 2), vm.stack("topic1").progress)

        core.tick(1.0)
        vm = CoreAdapter.snapshot(core)
        self.assertFalse(vm.stack("topic1").locked)
        self.assertEqual((), vm.stack("topic1").cards)
        self.assertEqual(1, vm.topics_cleared)

    def test_event_mapping(self):
        move_evt = CoreAdapter.event_to_animation(CardsMoved(("Apple", "Banana"), "stack1", "topic2"))
        draw_evt = CoreAdapter.event_to_animation(CardDrawn("Red"))
        recycle_evt = CoreAdapter.event_to_animation(CardsReturned(7))
        complete_evt = CoreAdapter.event_to_animation(TopicCompleted("topic2", "Fruits"))
        clear_evt = CoreAdapter.event_to_animation(TopicCleared("topic2", ("Fruits", "Apple", "Banana")))
        moves_evt = CoreAdapter.event_to_animation(MoveCountChanged(12))
        status_evt = CoreAdapter.event_to_animation(StatusChanged(GameStatus.WON))

        self.assertEqual("MOVE", move_evt.type)
        self.assertEqual({"src": "stack1", "dest": "topic2", "count": 2}, move_evt.payload)
        self.assertEqual("DRAW", draw_evt.type)
        self.assertEqual({"count": 7}, recycle_evt.payload)
        self.assertEqual("TOPIC_COMPLETE", complete_evt.type)
        self.assertEqual("Fruits", complete_evt.payload["topic"])
        self.assertEqual({"slot": "topic2", "count": 3}, clear_evt.payload)
        self.assertEqual(12, moves_evt.payload["moves_left"])
        self.assertEqual("won", status_evt.payload["status"])


if __name__ == "__main__":
    unittest.main()
