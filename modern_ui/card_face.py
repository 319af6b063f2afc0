import logging

from PIL import Image, ImageDraw, ImageFont

logger = logging.getLogger(__name__)

FONT_FILE = "DejaVuSans.ttf"
BOLD_FONT_FILE = "DejaVuSans-Bold.ttf"


def wrap_label(text, max_chars):
    """Greedy word wrap; a single word longer than the line is kept whole."""
    words = text.split()
    if not words:
        return []
    lines = []
    current = words[0]
    for word in words[1:]:
        if len(current) + 1 + len(word) <= max_chars:
            current = f"{current} {word}"
        else:
            lines.append(current)
            current = word
    lines.append(current)
    return lines


def _draw_centered(draw, cx, y, text, font, fill):
    left, top, right, _ = draw.textbbox((0, 0), text, font=font)
    draw.text((cx - (right - left) / 2 - left, y - top), text, font=font, fill=fill)


def _hex_to_rgba(color, alpha=255):
    color = color.lstrip("#")
    return int(color[0:2], 16), int(color[2:4], 16), int(color[4:6], 16), alpha


class CardFaceRenderer:
    """Renders card faces to Pillow images and caches them per size, theme and font scale."""

    def __init__(self):
        self.cache = {}
        self.fonts = {}

    def clear(self):
        self.cache.clear()

    def font(self, size, bold=False):
        key = (size, bold)
        if key not in self.fonts:
            try:
                self.fonts[key] = ImageFont.truetype(BOLD_FONT_FILE if bold else FONT_FILE, size)
            except OSError:
                logger.debug("%s not found, using the default bitmap font", FONT_FILE)
                self.fonts[key] = ImageFont.load_default()
        return self.fonts[key]

    def render_card_image(self, name, is_topic, size, theme, font_scale=1.0) -> Image.Image:
        cw, ch = size
        key = (name, is_topic, cw, ch, theme["card_front"], theme["topic_front"], font_scale)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        img = Image.new("RGBA", (cw, ch), (0, 0, 0, 0))
        draw = ImageDraw.Draw(img)
        radius = max(4, min(cw, ch) // 12)
        if is_topic:
            fill = _hex_to_rgba(theme["topic_front"])
            border = _hex_to_rgba(theme["topic_border"])
            draw.rounded_rectangle((0, 0, cw - 1, ch - 1), radius=radius, fill=fill, outline=border, width=3)
            inset = max(4, cw // 14)
            draw.rounded_rectangle((inset, inset, cw - 1 - inset, ch - 1 - inset), radius=max(2, radius - 2),
                                   outline=border, width=1)
        else:
            fill = _hex_to_rgba(theme["card_front"])
            border = _hex_to_rgba(theme["card_border"])
            draw.rounded_rectangle((0, 0, cw - 1, ch - 1), radius=radius, fill=fill, outline=border, width=1)

        text_color = _hex_to_rgba(theme["card_text"])
        font_px = max(8, int(min(cw, ch) * 0.13 * font_scale))
        font = self.font(font_px, bold=is_topic)
        max_chars = max(4, int(cw / (font_px * 0.6)))
        lines = wrap_label(name, max_chars)
        line_h = font_px + 3
        y = (ch - line_h * len(lines)) / 2
        if is_topic:
            y += font_px * 0.3
        for line in lines:
            _draw_centered(draw, cw / 2, y, line, font, text_color)
            y += line_h

        if is_topic:
            caption = self.font(max(7, int(font_px * 0.7)))
            _draw_centered(draw, cw / 2, max(6, ch * 0.1), "TOPIC", caption, border)

        self.cache[key] = img
        return img

    def draw_card_back(self, canvas, x, y, cw, ch, theme, font_scale):
        def fs(base):
            return max(8, int(base * font_scale))

        canvas.create_rectangle(x, y, x + cw, y + ch, fill=theme["card_back"], outline=theme["card_border"], width=1)
        step = max(8, int(cw / 6))
        for i in range(0, int(cw), step):
            canvas.create_line(x + i, y + 8, x + i + 10, y + ch - 8, fill=theme["deck_outline"], width=1)
        canvas.create_text(x + cw * 0.5, y + ch * 0.5, text="?", fill="#fde68a", font=f"Helvetica {fs(18)} bold")

    def draw_card(self, canvas, x, y, image, selected, cw, ch, theme):
        canvas.create_image(x, y, anchor="nw", image=image)
        if selected:
            canvas.create_rectangle(x, y, x + cw, y + ch, outline=theme["card_select"], width=3)
