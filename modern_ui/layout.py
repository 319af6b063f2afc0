from engine.Core import TABLEAU_IDS, TOPIC_SLOT_IDS, WASTE_ID
from modern_ui.ui_config import (
    CARD_HEIGHT_RATIO,
    CARD_WIDTH_RATIO,
    COLUMN_COUNT,
    COLUMN_GAP_RATIO,
    SLOT_STEP_RATIO,
    SLOT_TOP_RATIO,
    TABLEAU_TOP_RATIO,
    VISIBLE_STEP_RATIO,
)
from modern_ui.view_model import GameViewModel

DECK_COLUMN = 0
WASTE_COLUMN = 1
FIRST_TOPIC_COLUMN = 2


class BoardLayout:
    """Pixel geometry of the board for a given window size."""

    def __init__(self, width, height):
        self.width = width
        self.height = height

    def resize(self, width, height):
        self.width = width
        self.height = height

    def card_size(self):
        return self.width * CARD_WIDTH_RATIO, self.height * CARD_HEIGHT_RATIO

    def card_pixel_size(self):
        return max(1, int(self.width * CARD_WIDTH_RATIO)), max(1, int(self.height * CARD_HEIGHT_RATIO))

    def gap(self):
        return self.width * COLUMN_GAP_RATIO

    def column_x(self, col):
        cw, _ = self.card_size()
        gap = self.gap()
        # extra gutter between the deck/waste pair and the topic columns
        total_w = COLUMN_COUNT * cw + (COLUMN_COUNT + 1) * gap
        start_x = (self.width - total_w) / 2
        x = start_x + col * (cw + gap)
        if col >= FIRST_TOPIC_COLUMN:
            x += gap * 2
        return x

    def slot_top(self):
        return self.height * SLOT_TOP_RATIO

    def tableau_top(self):
        return self.height * TABLEAU_TOP_RATIO

    def column_of(self, stack_id):
        if stack_id == WASTE_ID:
            return WASTE_COLUMN
        if stack_id in TOPIC_SLOT_IDS:
            return FIRST_TOPIC_COLUMN + TOPIC_SLOT_IDS.index(stack_id)
        if stack_id in TABLEAU_IDS:
            return FIRST_TOPIC_COLUMN + TABLEAU_IDS.index(stack_id)
        raise KeyError(stack_id)

    def stack_origin(self, stack_id):
        x = self.column_x(self.column_of(stack_id))
        y = self.tableau_top() if stack_id in TABLEAU_IDS else self.slot_top()
        return x, y

    def deck_position(self):
        return self.column_x(DECK_COLUMN), self.slot_top()

    def is_point_in_deck(self, x, y):
        dx, dy = self.deck_position()
        dw, dh = self.card_size()
        return dx <= x <= dx + dw and dy <= y <= dy + dh

    def slot_step(self):
        return self.height * SLOT_STEP_RATIO

    def visible_step(self, vm: GameViewModel = None):
        base_step = self.height * VISIBLE_STEP_RATIO
        if vm is None or not vm.tableau:
            return base_step
        max_cards = max(len(stack.cards) for stack in vm.tableau)
        if max_cards <= 1:
            return base_step

        _, ch = self.card_size()
        # leave room for the status line under the longest pile
        max_span = self.height - self.tableau_top() - ch - 32
        if max_span <= 0:
            return max(6.0, base_step * 0.4)
        fit_step = max_span / (max_cards - 1)
        min_step = max(6.0, ch * 0.08)
        return max(min_step, min(base_step, fit_step))

    def card_position(self, stack_id, card_idx, vm: GameViewModel = None):
        x, y = self.stack_origin(stack_id)
        if stack_id == WASTE_ID:
            return x, y
        if stack_id in TOPIC_SLOT_IDS:
            return x, y + self.slot_step() * card_idx
        return x, y + self.visible_step(vm) * card_idx

    def find_card(self, vm: GameViewModel, x, y):
        """The (stack id, card index) under the point, searching piles a drag can start from."""
        if vm is None:
            return None
        cw, ch = self.card_size()
        step = self.visible_step(vm)
        for stack in vm.tableau:
            sx, sy = self.stack_origin(stack.id)
            if not (sx <= x <= sx + cw) or not stack.cards:
                continue
            max_y = sy + ch + step * (len(stack.cards) - 1)
            if y < sy or y > max_y:
                continue
            idx = int((y - sy) // step)
            idx = max(0, min(idx, len(stack.cards) - 1))
            return stack.id, idx

        if vm.waste.cards:
            wx, wy = self.stack_origin(WASTE_ID)
            if wx <= x <= wx + cw and wy <= y <= wy + ch:
                return WASTE_ID, len(vm.waste.cards) - 1
        return None

    def find_drop_stack(self, x, y):
        cw, _ = self.card_size()
        for i in range(len(TOPIC_SLOT_IDS)):
            sx = self.column_x(FIRST_TOPIC_COLUMN + i)
            if sx <= x <= sx + cw:
                if y < self.tableau_top() - self.gap():
                    return TOPIC_SLOT_IDS[i]
                return TABLEAU_IDS[i]
        return None
