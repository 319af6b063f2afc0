import tempfile
import unittest
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

from engine.Core import Core, GameStatus
from engine.Topics import Topic, TopicCatalog
from modern_ui import settings_store, stats_store
from modern_ui.modern_interface import ModernTkInterface
from modern_ui.ui_config import GAME, GUIDE, MENU


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def small_catalog():
    return TopicCatalog({
        "easy": [
            Topic("Fruits", ("Apple", "Banana")),
            Topic("Colors", ("Red", "Blue")),
        ],
    })


class SettingsStoreTestCase(unittest.TestCase):
    def test_sanitize_replaces_unknown_values(self):
        data = settings_store._sanitize({"difficulty": "HARD", "theme_name": "Neon", "font_scale": "Tiny",
                                         "extra": "x"})
        self.assertEqual({"difficulty": "hard", "theme_name": "Forest", "font_scale": "Normal"}, data)

    def test_save_then_load(self):
        with tempfile.TemporaryDirectory() as td:
            ini_path = Path(td) / "settings.ini"
            with patch.object(settings_store, "SETTINGS_PATH", ini_path):
                settings_store.save_settings({"difficulty": "medium", "theme_name": "Ocean", "font_scale": "Large"})
                text = ini_path.read_text(encoding="utf-8")
                data = settings_store.load_settings()
        self.assertIn("[ui]", text)
        self.assertIn("theme_name = Ocean", text)
        self.assertEqual({"difficulty": "medium", "theme_name": "Ocean", "font_scale": "Large"}, data)

    def test_missing_file_gives_defaults(self):
        with tempfile.TemporaryDirectory() as td:
            with patch.object(settings_store, "SETTINGS_PATH", Path(td) / "absent.ini"):
                self.assertEqual(settings_store.DEFAULT_SETTINGS, settings_store.load_settings())

    def test_unreadable_file_gives_defaults(self):
        with tempfile.TemporaryDirectory() as td:
            ini_path = Path(td) / "settings.ini"
            ini_path.write_text("difficulty = hard\n", encoding="utf-8")
            with patch.object(settings_store, "SETTINGS_PATH", ini_path):
                with self.assertLogs("modern_ui.settings_store", level="WARNING"):
                    data = settings_store.load_settings()
        self.assertEqual(settings_store.DEFAULT_SETTINGS, data)


class StatsStoreTestCase(unittest.TestCase):
    def test_record_win_and_loss(self):
        stats = stats_store._default_stats()
        stats = stats_store.record_game_started(stats, "hard")
        stats = stats_store.record_game_won(stats, "hard", 12.5, 33)
        stats = stats_store.record_game_started(stats, "hard")
        stats = stats_store.record_game_won(stats, "hard", 7.5, 10)

        bucket = stats["by_difficulty"]["hard"]
        self.assertEqual(2, bucket["games_started"])
        self.assertEqual(2, bucket["games_won"])
        self.assertEqual(43, bucket["total_actions"])
        self.assertAlmostEqual(20.0, bucket["total_duration_sec"])
        self.assertEqual(2, bucket["best_streak"])

        stats = stats_store.record_game_lost(stats, "hard")
        bucket = stats["by_difficulty"]["hard"]
        self.assertEqual(1, bucket["games_lost"])
        self.assertEqual(0, bucket["current_streak"])
        self.assertEqual(2, bucket["best_streak"])
        self.assertEqual(1, stats["overall"]["games_lost"])
        self.assertEqual(0, stats["by_difficulty"]["easy"]["games_started"])

    def test_sanitize_drops_garbage(self):
        data = stats_store._sanitize({"overall": {"games_started": "7", "games_won": -3},
                                      "by_difficulty": {"medium": {"best_streak": "x"}, "bogus": {}}})
        self.assertEqual(7, data["overall"]["games_started"])
        self.assertEqual(0, data["overall"]["games_won"])
        self.assertEqual(0, data["by_difficulty"]["medium"]["best_streak"])
        self.assertNotIn("bogus", data["by_difficulty"])

    def test_malformed_file_gives_defaults(self):
        with tempfile.TemporaryDirectory() as td:
            stats_path = Path(td) / "stats.json"
            stats_path.write_text("{not json", encoding="utf-8")
            with patch.object(stats_store, "STATS_PATH", stats_path):
                with self.assertLogs("modern_ui.stats_store", level="WARNING"):
                    data = stats_store.load_stats()
        self.assertEqual(stats_store._default_stats(), data)


class ModernInterfaceTestCase(unittest.TestCase):
    def setUp(self):
        patches = [
            patch("modern_ui.modern_interface.load_settings",
                  return_value={"difficulty": "medium", "theme_name": "Ocean", "font_scale": "Normal"}),
            patch("modern_ui.modern_interface.load_stats", return_value=stats_store._default_stats()),
            patch("modern_ui.modern_interface.save_stats"),
            patch("modern_ui.modern_interface.save_settings"),
        ]
        for p in patches:
            p.start()
            self.addCleanup(p.stop)
        self.ui = ModernTkInterface()

    def test_settings_are_loaded_on_construction(self):
        self.assertEqual("medium", self.ui.difficulty)
        self.assertEqual("Ocean", self.ui.theme_name)
        self.assertEqual(MENU, self.ui.stage)

    def test_build_config_uses_difficulty_and_seed(self):
        config = self.ui.build_config(seed=42)
        self.assertEqual("medium", config.difficulty)
        self.assertEqual(42, config.seed)
        self.assertEqual(42, self.ui.current_seed)

        config = self.ui.build_config()
        self.assertIsNotNone(config.seed)
        self.assertEqual("random", self.ui.seed_source)

    def test_start_new_game_is_reproducible(self):
        self.ui.start_new_game(seed=123, source="manual")
        self.assertEqual(GAME, self.ui.stage)
        self.assertEqual("manual", self.ui.seed_source)
        self.assertIsNotNone(self.ui.vm)
        first = [s.cards for s in self.ui.core.board.tableau]
        self.assertEqual(1, self.ui.stats["overall"]["games_started"])

        self.ui.restart_same_seed_game()
        self.assertEqual(first, [s.cards for s in self.ui.core.board.tableau])
        self.assertEqual("replay", self.ui.seed_source)
        # abandoning a running game counts as a loss
        self.assertEqual(1, self.ui.stats["overall"]["games_lost"])
        self.assertEqual(2, self.ui.stats["by_difficulty"]["medium"]["games_started"])

    def test_draw_key_draws_from_deck(self):
        self.ui.start_new_game(seed=5)
        self.ui.core.loadBoard([["Red"], [], [], []], drawPile=["Blue", "Green"], movesLeft=10)
        self.ui.on_key(SimpleNamespace(keysym="d"))
        self.assertEqual(["Blue"], self.ui.core.board.waste.cards)
        self.assertEqual(9, self.ui.vm.moves_left)
        self.assertEqual(1, self.ui.current_game_actions)
        self.assertEqual("DRAW", self.ui.anim_queue[0].type)

    def test_reshuffle_key_only_with_empty_deck(self):
        self.ui.start_new_game(seed=5)
        self.ui.core.loadBoard([["Red"], [], [], []], drawPile=["Blue"], waste=["Green"], movesLeft=10)
        self.ui.on_key(SimpleNamespace(keysym="r"))
        self.assertEqual(["Green"], self.ui.core.board.waste.cards)
        self.assertIn("reshuffle", self.ui.message)

        self.ui.on_key(SimpleNamespace(keysym="d"))
        self.ui.on_key(SimpleNamespace(keysym="r"))
        self.assertEqual([], self.ui.core.board.waste.cards)
        self.assertEqual(["Blue", "Green"], sorted(self.ui.core.board.drawPile))

    def test_guide_opens_from_menu_and_returns(self):
        self.ui.on_key(SimpleNamespace(keysym="question"))
        self.assertEqual(GUIDE, self.ui.stage)
        self.ui.on_key(SimpleNamespace(keysym="Escape"))
        self.assertEqual(MENU, self.ui.stage)

        self.ui.active_buttons = [{"action": "guide", "rect": (0, 0, 100, 40)}]
        self.ui.on_page_click(50, 20)
        self.assertEqual(GUIDE, self.ui.stage)
        self.ui.active_buttons = [{"action": "close_guide", "rect": (0, 0, 100, 40)}]
        self.ui.on_page_click(50, 20)
        self.assertEqual(MENU, self.ui.stage)

    def test_guide_during_game_keeps_the_game(self):
        self.ui.start_new_game(seed=5)
        core = self.ui.core
        self.ui.on_key(SimpleNamespace(keysym="F1"))
        self.assertEqual(GUIDE, self.ui.stage)
        self.ui.on_key(SimpleNamespace(keysym="F1"))
        self.assertEqual(GAME, self.ui.stage)
        self.assertIs(core, self.ui.core)
        self.assertEqual(0, self.ui.stats["overall"]["games_lost"])

    def test_win_is_recorded(self):
        clock = FakeClock()
        core = Core(catalog=small_catalog(), clock=clock)
        core.registerInterface(self.ui)
        self.ui.stage = GAME
        self.ui.begin_game_tracking()
        core.loadBoard([["Banana"], [], [], []], topicSlots=[["Fruits", "Apple"], [], [], []], movesLeft=10)

        self.assertTrue(core.askMove("stack1", 0, "topic1"))
        self.assertIn("Fruits", self.ui.message)
        clock.now = 1.0
        core.tick()

        self.assertEqual(GameStatus.WON, core.status)
        self.assertTrue(self.ui.end_panel_visible)
        self.assertTrue(self.ui.end_summary["won"])
        self.assertEqual(1, self.ui.stats["overall"]["games_won"])
        self.assertEqual(1, self.ui.stats["overall"]["current_streak"])

    def test_loss_is_recorded_once(self):
        self.ui.start_new_game(seed=5)
        self.ui.core.loadBoard([["Red"], [], [], []], drawPile=["Blue"], movesLeft=1)
        self.ui.on_key(SimpleNamespace(keysym="d"))

        self.assertEqual(GameStatus.LOST, self.ui.core.status)
        self.assertFalse(self.ui.end_summary["won"])
        self.ui.start_new_game(seed=6)
        self.assertEqual(1, self.ui.stats["overall"]["games_lost"])


if __name__ == "__main__":
    unittest.main()
