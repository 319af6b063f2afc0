import unittest

from modern_ui.card_face import CardFaceRenderer, wrap_label
from modern_ui.ui_config import THEMES


class CardFaceTestCase(unittest.TestCase):
    def test_wrap_label(self):
        self.assertEqual(["Solar", "System", "Planets"], wrap_label("Solar System Planets", 8))
        self.assertEqual(["Solar System", "Planets"], wrap_label("Solar System Planets", 12))
        self.assertEqual(["Extraordinary"], wrap_label("Extraordinary", 5))
        self.assertEqual([], wrap_label("   ", 5))

    def test_render_card_image_size_and_cache(self):
        renderer = CardFaceRenderer()
        theme = THEMES["Forest"]
        img = renderer.render_card_image("Apple", False, (80, 120), theme)
        self.assertEqual((80, 120), img.size)
        self.assertEqual("RGBA", img.mode)
        self.assertIs(img, renderer.render_card_image("Apple", False, (80, 120), theme))

        topic = renderer.render_card_image("Apple", True, (80, 120), theme)
        self.assertIsNot(img, topic)
        other_theme = renderer.render_card_image("Apple", False, (80, 120), THEMES["Ocean"])
        self.assertIsNot(img, other_theme)

        renderer.clear()
        self.assertIsNot(img, renderer.render_card_image("Apple", False, (80, 120), theme))

    def test_topic_and_regular_faces_differ(self):
        renderer = CardFaceRenderer()
        theme = THEMES["Sunset"]
        regular = renderer.render_card_image("Fruits", False, (90, 130), theme)
        topic = renderer.render_card_image("Fruits", True, (90, 130), theme)
        self.assertNotEqual(regular.getpixel((12, 110)), topic.getpixel((12, 110)))


if __name__ == "__main__":
    unittest.main()
