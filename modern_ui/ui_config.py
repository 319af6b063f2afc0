MENU = 1
SETTINGS = 2
GAME = 3
STATS = 4
GUIDE = 5

# board is laid out on a six column grid: deck, waste, then the four topic columns
COLUMN_COUNT = 6
COLUMN_GAP_RATIO = 0.015
SLOT_TOP_RATIO = 0.12
TABLEAU_TOP_RATIO = 0.48
CARD_WIDTH_RATIO = 0.12
CARD_HEIGHT_RATIO = 0.2
VISIBLE_STEP_RATIO = 0.06
SLOT_STEP_RATIO = 0.018
ANIM_DURATION = 0.22
FPS_MS = 16

DIFFICULTY_ORDER = ("easy", "medium", "hard")
DIFFICULTY_LABELS = {"easy": "Easy", "medium": "Medium", "hard": "Hard"}
THEME_ORDER = ("Forest", "Ocean", "Sunset")
FONT_SCALE_ORDER = ("Small", "Normal", "Large", "X-Large", "Huge")
FONT_SCALE_FACTOR = {
    "Small": 0.95,
    "Normal": 1.1,
    "Large": 1.25,
    "X-Large": 1.45,
    "Huge": 1.7,
}

THEMES = {
    "Forest": {
        "bg_base": "#1b4332",
        "bg_band_a": "#315d49",
        "bg_band_b": "#244636",
        "hud_text": "#f1f5f9",
        "hud_subtext": "#d1fae5",
        "deck_fill": "#2d6a4f",
        "deck_outline": "#a7f3d0",
        "slot_outline": "#99f6e4",
        "slot_valid": "#4ade80",
        "slot_invalid": "#ef4444",
        "slot_complete": "#facc15",
        "card_front": "#f7e8bc",
        "card_text": "#1f2937",
        "card_back": "#334155",
        "card_border": "#0f172a",
        "card_select": "#fde047",
        "topic_front": "#fde68a",
        "topic_border": "#b45309",
        "particle": ["#f8fafc", "#fde68a", "#bfdbfe", "#86efac"],
    },
    "Ocean": {
        "bg_base": "#0b2545",
        "bg_band_a": "#1f4f73",
        "bg_band_b": "#123552",
        "hud_text": "#e0f2fe",
        "hud_subtext": "#bae6fd",
        "deck_fill": "#0369a1",
        "deck_outline": "#7dd3fc",
        "slot_outline": "#67e8f9",
        "slot_valid": "#22d3ee",
        "slot_invalid": "#fb7185",
        "slot_complete": "#fcd34d",
        "card_front": "#f8fafc",
        "card_text": "#0f172a",
        "card_back": "#1e3a8a",
        "card_border": "#082f49",
        "card_select": "#38bdf8",
        "topic_front": "#fef3c7",
        "topic_border": "#d97706",
        "particle": ["#e0f2fe", "#67e8f9", "#93c5fd", "#f0abfc"],
    },
    "Sunset": {
        "bg_base": "#3f1d38",
        "bg_band_a": "#7c2d4f",
        "bg_band_b": "#5b2141",
        "hud_text": "#fff7ed",
        "hud_subtext": "#fed7aa",
        "deck_fill": "#b45309",
        "deck_outline": "#fcd34d",
        "slot_outline": "#fdba74",
        "slot_valid": "#f59e0b",
        "slot_invalid": "#ef4444",
        "slot_complete": "#fde047",
        "card_front": "#fffbeb",
        "card_text": "#431407",
        "card_back": "#7c2d12",
        "card_border": "#431407",
        "card_select": "#fb7185",
        "topic_front": "#fde68a",
        "topic_border": "#92400e",
        "particle": ["#fff7ed", "#fcd34d", "#fb7185", "#fdba74"],
    },
}

GUIDE_SECTIONS = (
    ("Goal", "Complete every topic by collecting all of its cards. Completed topics leave the board."),
    ("Topic cards", "Gold-framed cards name a topic. Drag one onto an empty slot in the top row to start it."),
    ("Regular cards", "Every other card belongs to exactly one topic. Drop it on the slot holding its topic card."),
    ("Stacking", "Related cards can be stacked in the tableau and dragged together as one run."),
    ("Deck", "Click the deck or press D to draw. When it runs dry, R shuffles the drawn cards back in."),
    ("Moves", "Every draw, reshuffle and move costs one move. Run out with cards left and the game is lost."),
    ("Tip", "Keep related cards stacked together: moving a run costs the same as moving one card."),
)
