import unittest
from dataclasses import replace

from engine.Core import Core
from engine.Interface import Interface
from engine.Topics import Topic, TopicCatalog
from modern_ui.adapter import CoreAdapter
from modern_ui.layout import BoardLayout


def snapshot():
    catalog = TopicCatalog({
        "easy": [
            Topic("Fruits", ("Apple", "Banana")),
            Topic("Colors", ("Red", "Blue")),
        ],
    })
    core = Core(catalog=catalog)
    core.registerInterface(Interface())
    core.loadBoard([["Red", "Banana"], ["Colors"], [], []], waste=["Blue", "Apple"],
                   topicSlots=[["Fruits"], [], [], []],
                   movesLeft=30)
    return CoreAdapter.snapshot(core)


class BoardLayoutTestCase(unittest.TestCase):
    def setUp(self):
        self.layout = BoardLayout(1000, 1000)

    def test_columns_and_origins(self):
        cw, ch = self.layout.card_size()
        self.assertAlmostEqual(120.0, cw)
        self.assertAlmostEqual(200.0, ch)
        self.assertAlmostEqual(87.5, self.layout.column_x(0))
        self.assertAlmostEqual(222.5, self.layout.column_x(1))
        # topic columns sit after a wider gutter
        self.assertAlmostEqual(387.5, self.layout.column_x(2))

        x, y = self.layout.stack_origin("topic1")
        self.assertAlmostEqual(387.5, x)
        self.assertAlmostEqual(120.0, y)
        x, y = self.layout.stack_origin("stack1")
        self.assertAlmostEqual(387.5, x)
        self.assertAlmostEqual(480.0, y)
        self.assertEqual(self.layout.stack_origin("waste"), (self.layout.column_x(1), self.layout.slot_top()))

    def test_slots_do_not_reach_the_tableau(self):
        _, slot_y = self.layout.card_position("topic4", 6)
        _, ch = self.layout.card_size()
        self.assertLess(slot_y + ch, self.layout.tableau_top())

    def test_card_positions(self):
        x, y = self.layout.card_position("stack2", 2)
        self.assertAlmostEqual(522.5, x)
        self.assertAlmostEqual(600.0, y)
        x, y = self.layout.card_position("topic1", 3)
        self.assertAlmostEqual(174.0, y)
        self.assertEqual(self.layout.stack_origin("waste"), self.layout.card_position("waste", 5))

    def test_deck_hit(self):
        self.assertTrue(self.layout.is_point_in_deck(100, 150))
        self.assertFalse(self.layout.is_point_in_deck(100, 500))
        self.assertFalse(self.layout.is_point_in_deck(300, 150))

    def test_find_drop_stack(self):
        self.assertEqual("topic1", self.layout.find_drop_stack(400, 200))
        self.assertEqual("stack1", self.layout.find_drop_stack(400, 500))
        self.assertEqual("stack1", self.layout.find_drop_stack(400, 470))
        self.assertEqual("topic4", self.layout.find_drop_stack(800, 300))
        self.assertIsNone(self.layout.find_drop_stack(100, 500))
        self.assertIsNone(self.layout.find_drop_stack(950, 500))

    def test_find_card(self):
        vm = snapshot()
        self.assertEqual(("stack1", 0), self.layout.find_card(vm, 400, 490))
        self.assertEqual(("stack1", 1), self.layout.find_card(vm, 400, 545))
        self.assertEqual(("stack1", 1), self.layout.find_card(vm, 400, 700))
        self.assertIsNone(self.layout.find_card(vm, 400, 800))
        self.assertIsNone(self.layout.find_card(vm, 700, 500))
        self.assertEqual(("waste", 1), self.layout.find_card(vm, 250, 150))
        self.assertIsNone(self.layout.find_card(None, 400, 490))

    def test_visible_step_shrinks_for_tall_piles(self):
        short = self.layout.visible_step(None)
        self.assertAlmostEqual(60.0, short)
        layout = BoardLayout(1000, 600)
        vm = snapshot()
        tall = replace(vm.stack("stack1"), cards=vm.stack("stack1").cards * 10)
        crowded = replace(vm, tableau=(tall,) + vm.tableau[1:])
        self.assertLess(layout.visible_step(crowded), layout.height * 0.06)


if __name__ == "__main__":
    unittest.main()
