import logging
import math
import random
import sys
import time
from tkinter import BOTH, Canvas, Tk, messagebox, simpledialog

from PIL import ImageTk

from engine.Core import WASTE_ID, Core, GameConfig, TopicCleared, TopicCompleted
from engine.Interface import Interface
from modern_ui.adapter import CoreAdapter
from modern_ui.card_face import CardFaceRenderer
from modern_ui.entities import ClearingSlot, DragState, MovingCard, Particle
from modern_ui.layout import BoardLayout
from modern_ui.settings_store import load_settings, save_settings
from modern_ui.stats_store import load_stats, record_game_lost, record_game_started, record_game_won, save_stats
from modern_ui.ui_config import (
    ANIM_DURATION,
    DIFFICULTY_LABELS,
    DIFFICULTY_ORDER,
    FONT_SCALE_FACTOR,
    FONT_SCALE_ORDER,
    FPS_MS,
    GAME,
    GUIDE,
    GUIDE_SECTIONS,
    MENU,
    SETTINGS,
    STATS,
    THEMES,
    THEME_ORDER,
)
from solver.analyzer import hint

logger = logging.getLogger(__name__)


class ModernTkInterface(Interface):
    SEED_SOURCE_TEXT = {"random": "random", "manual": "manual", "replay": "replay"}
    CLEAR_FADE_DURATION = 0.6
    DIFFICULTY_KEYS = {"1": "easy", "2": "medium", "3": "hard"}
    GUIDE_KEYS = ("question", "f1")

    def __init__(self, width=1200, height=760):
        super().__init__()
        self.width = width
        self.height = height
        self.layout = BoardLayout(width, height)
        self.root = None
        self.canvas = None
        self.stage = MENU

        self.vm = None
        self.message = ""

        self.difficulty = "easy"
        self.theme_name = "Forest"
        self.font_scale = "Normal"
        self.current_seed = None
        self.seed_source = "random"

        self.anim_queue = []
        self.anim_cards = []
        self.anim_start = 0.0
        self.anim_duration = ANIM_DURATION

        self.drag = None
        self.hover_drop_stack = None
        self.hover_drop_valid = False
        self.pending_move_anim = None

        self.particles = []
        self.clearing_slots = []
        self.fx_rng = random.Random()

        self.active_buttons = []
        self.guide_return_stage = MENU
        self.stats = load_stats()
        self.current_game_started_at = None
        self.current_game_actions = 0
        self.current_game_recorded = False
        self.end_panel_visible = False
        self.end_summary = {}

        self.card_renderer = CardFaceRenderer()
        self.face_images = {}
        self.needs_redraw = True
        self.load_persisted_settings()

    def run(self):
        self.root = Tk()
        self.root.title("Topic Solitaire")
        self.root.resizable(True, True)
        self.canvas = Canvas(self.root, width=self.width, height=self.height, highlightthickness=0, bd=0)
        self.canvas.pack(expand=1, fill=BOTH)

        self.root.bind("<Configure>", self.on_resize)
        self.root.bind("<Button-1>", self.on_press)
        self.root.bind("<Button-2>", self.on_right_click)
        self.root.bind("<Button-3>", self.on_right_click)
        self.root.bind("<B1-Motion>", self.on_drag)
        self.root.bind("<ButtonRelease-1>", self.on_release)
        self.root.bind("<Key>", self.on_key)
        self.root.protocol("WM_DELETE_WINDOW", self.on_close)

        self.open_menu()
        self.tick()
        self.root.mainloop()

    @property
    def theme(self):
        return THEMES[self.theme_name]

    def load_persisted_settings(self):
        settings = load_settings()
        self.difficulty = settings["difficulty"]
        self.theme_name = settings["theme_name"]
        self.font_scale = settings["font_scale"]

    def persist_settings(self):
        save_settings(
            {
                "difficulty": self.difficulty,
                "theme_name": self.theme_name,
                "font_scale": self.font_scale,
            }
        )

    def refresh_card_faces(self):
        self.face_images = {}
        self.card_renderer.clear()
        self.request_redraw()

    def request_redraw(self):
        self.needs_redraw = True

    def fs(self, base):
        factor = FONT_SCALE_FACTOR[self.font_scale]
        return max(8, int(base * factor))

    def on_close(self):
        if not messagebox.askyesno("Quit", "Really quit the game?"):
            return
        if self.stage == GAME and self.core is not None and self.core.isPlaying():
            self.mark_game_lost_if_needed()
        self.persist_settings()
        self.root.destroy()

    def cycle_value(self, order, current):
        idx = order.index(current)
        return order[(idx + 1) % len(order)]

    def difficulty_label(self, difficulty=None):
        difficulty = difficulty or self.difficulty
        return DIFFICULTY_LABELS.get(difficulty, difficulty)

    def set_difficulty(self, difficulty):
        if difficulty not in DIFFICULTY_ORDER:
            return
        self.difficulty = difficulty
        self.persist_settings()

    def open_menu(self):
        self.cancel_drag(quiet=True)
        self.stage = MENU
        self.anim_cards.clear()
        self.anim_queue.clear()
        self.active_buttons = []
        self.message = "Start a new game, enter a seed, or open the settings."
        self.request_redraw()

    def open_stats(self):
        self.cancel_drag(quiet=True)
        self.stage = STATS
        self.active_buttons = []
        self.message = "Statistics overview."
        self.request_redraw()

    def open_guide(self):
        self.cancel_drag(quiet=True)
        self.guide_return_stage = GAME if self.stage == GAME else MENU
        self.stage = GUIDE
        self.active_buttons = []
        self.message = "How to play."
        self.request_redraw()

    def close_guide(self):
        if self.guide_return_stage == GAME and self.core is not None:
            self.stage = GAME
            self.active_buttons = []
            self.message = "Back to the game."
            self.request_redraw()
        else:
            self.open_menu()

    def open_settings(self):
        self.cancel_drag(quiet=True)
        self.stage = SETTINGS
        self.active_buttons = []
        self.message = "Pick the difficulty, theme and font size."
        self.request_redraw()

    def begin_game_tracking(self):
        self.current_game_started_at = time.time()
        self.current_game_actions = 0
        self.current_game_recorded = False
        self.stats = record_game_started(self.stats, self.difficulty)
        save_stats(self.stats)

    def mark_game_won_if_needed(self):
        if self.current_game_recorded or self.current_game_started_at is None:
            return
        duration = time.time() - self.current_game_started_at
        self.stats = record_game_won(self.stats, self.difficulty, duration, self.current_game_actions)
        save_stats(self.stats)
        self.current_game_recorded = True

    def mark_game_lost_if_needed(self):
        if self.current_game_recorded or self.current_game_started_at is None:
            return
        self.stats = record_game_lost(self.stats, self.difficulty)
        save_stats(self.stats)
        self.current_game_recorded = True

    def build_config(self, seed=None):
        if seed is None:
            seed = self.fx_rng.randrange(1, 2 ** 31)
            self.seed_source = "random"
        self.current_seed = int(seed)
        return GameConfig(difficulty=self.difficulty, seed=self.current_seed)

    def start_new_game(self, seed=None, source=None):
        if self.stage == GAME:
            self.mark_game_lost_if_needed()
        config = self.build_config(seed)
        if source is not None:
            self.seed_source = source
        core = Core()
        core.registerInterface(self)
        core.startGame(config)

        self.stage = GAME
        self.drag = None
        self.hover_drop_stack = None
        self.hover_drop_valid = False
        self.pending_move_anim = None

        self.anim_queue.clear()
        self.anim_cards.clear()
        self.particles.clear()
        self.clearing_slots.clear()
        self.end_panel_visible = False
        self.end_summary = {}

        self.message = (
            f"{self.difficulty_label()} game with {len(core.topics)} topics "
            f"(seed {self.current_seed}, {self.SEED_SOURCE_TEXT.get(self.seed_source, self.seed_source)}). "
            f"Drag cards to build topics. Press H for a hint."
        )
        logger.info("started %s game with seed %s", self.difficulty, self.current_seed)
        self.begin_game_tracking()
        self.request_redraw()

    def restart_same_seed_game(self):
        if self.current_seed is None:
            self.message = "No seed to replay yet."
            self.request_redraw()
            return
        self.start_new_game(seed=self.current_seed, source="replay")

    def prompt_and_start_seeded_game(self):
        seed = simpledialog.askinteger("Seed", "Enter a seed:", parent=self.root, minvalue=0)
        if seed is None:
            return
        self.start_new_game(seed=seed, source="manual")

    def onStart(self):
        self.vm = CoreAdapter.snapshot(self.core)
        self.request_redraw()

    def onWin(self):
        self.vm = CoreAdapter.snapshot(self.core)
        self.end_summary = self.build_end_summary(won=True)
        self.mark_game_won_if_needed()
        self.end_panel_visible = True
        self.message = "All topics cleared! Press N for a new game or M for the menu."
        self.spawn_firework_burst(self.width * 0.5, self.height * 0.3, 34)
        self.spawn_firework_burst(self.width * 0.35, self.height * 0.26, 28)
        self.spawn_firework_burst(self.width * 0.65, self.height * 0.26, 28)
        self.request_redraw()

    def onLose(self):
        self.vm = CoreAdapter.snapshot(self.core)
        self.end_summary = self.build_end_summary(won=False)
        self.mark_game_lost_if_needed()
        self.end_panel_visible = True
        self.message = "Out of moves. Press G to replay this deal or N for a new one."
        self.request_redraw()

    def onEvent(self, event):
        self.vm = CoreAdapter.snapshot(self.core)
        self.anim_queue.append(CoreAdapter.event_to_animation(event))
        if isinstance(event, TopicCompleted):
            self.message = f"Topic complete: {event.topic}!"
        elif isinstance(event, TopicCleared):
            self.message = f"{len(event.cards)} cards cleared."
        super().onEvent(event)

    def notifyRedraw(self):
        self.request_redraw()

    def build_end_summary(self, won):
        duration = 0.0
        if self.current_game_started_at is not None:
            duration = max(0.0, time.time() - self.current_game_started_at)
        return {
            "won": won,
            "actions": int(self.current_game_actions),
            "duration_sec": duration,
            "difficulty": self.difficulty_label(),
            "topics": f"{self.vm.topics_cleared}/{self.vm.topics_total}",
            "moves_left": self.vm.moves_left,
        }

    def show_hint(self):
        if self.core is None or not self.core.isPlaying():
            return
        action = hint(self.core)
        if action is None:
            self.message = "No hint: nothing left to try."
        elif action.kind == "DRAW":
            self.message = "Hint: draw a card from the deck."
        elif action.kind == "RECYCLE":
            self.message = "Hint: turn the waste back into the deck."
        else:
            card = self.core.stack(action.src).cards[action.src_idx]
            self.message = f"Hint: move {card} to {action.dest}."
        self.request_redraw()

    def draw_from_deck(self):
        if self.core.board.drawPile:
            ok = self.core.askDraw()
        else:
            ok = self.core.askReshuffle()
            if ok:
                self.message = "Waste shuffled back into the deck."
        if not ok:
            self.message = "Nothing to draw."
        else:
            self.current_game_actions += 1
        self.request_redraw()

    def on_resize(self, event):
        if event.widget != self.root:
            return
        old_card_px = self.layout.card_pixel_size()
        self.width = event.width
        self.height = event.height
        self.layout.resize(self.width, self.height)
        if old_card_px != self.layout.card_pixel_size():
            self.refresh_card_faces()
        self.request_redraw()

    def on_key(self, event):
        key = event.keysym.lower()
        if key == "m":
            self.open_menu()
            return

        if self.stage == MENU:
            if key in ("n", "return"):
                self.start_new_game()
            elif key == "i":
                self.prompt_and_start_seeded_game()
            elif key in self.DIFFICULTY_KEYS:
                self.set_difficulty(self.DIFFICULTY_KEYS[key])
            elif key == "s":
                self.open_settings()
            elif key in self.GUIDE_KEYS:
                self.open_guide()
            elif key == "p":
                self.open_stats()
            self.request_redraw()
            return

        if self.stage == SETTINGS:
            if key == "escape":
                self.open_menu()
            elif key in self.DIFFICULTY_KEYS:
                self.set_difficulty(self.DIFFICULTY_KEYS[key])
            elif key == "b":
                self.set_difficulty(self.cycle_value(DIFFICULTY_ORDER, self.difficulty))
            elif key == "t":
                self.theme_name = self.cycle_value(THEME_ORDER, self.theme_name)
                self.refresh_card_faces()
                self.persist_settings()
            elif key == "f":
                self.font_scale = self.cycle_value(FONT_SCALE_ORDER, self.font_scale)
                self.refresh_card_faces()
                self.persist_settings()
            self.request_redraw()
            return

        if self.stage == GUIDE:
            if key == "escape" or key in self.GUIDE_KEYS:
                self.close_guide()
            else:
                self.request_redraw()
            return

        if self.stage == STATS:
            if key in ("escape", "p"):
                self.open_menu()
            else:
                self.request_redraw()
            return

        if self.stage == GAME:
            if key == "n":
                self.start_new_game()
            elif key == "g":
                self.restart_same_seed_game()
            elif key in self.DIFFICULTY_KEYS:
                self.set_difficulty(self.DIFFICULTY_KEYS[key])
                self.start_new_game()
            elif key == "escape":
                self.cancel_drag()
            elif key in self.GUIDE_KEYS:
                self.open_guide()
            elif self.end_panel_visible:
                pass
            elif key == "d":
                if self.core.board.drawPile:
                    self.draw_from_deck()
                else:
                    self.message = "The deck is empty. Press R to reshuffle the waste."
            elif key == "r":
                if not self.core.askReshuffle():
                    self.message = "You can only reshuffle once the deck is empty."
                else:
                    self.current_game_actions += 1
            elif key == "h":
                self.show_hint()
            elif key == "s":
                self.open_settings()
            elif key == "p":
                self.open_stats()
            self.request_redraw()

    def on_press(self, event):
        if self.stage in (MENU, SETTINGS, STATS, GUIDE):
            self.on_page_click(event.x, event.y)
            return

        if self.vm is None or self.anim_cards or self.end_panel_visible:
            return

        if self.layout.is_point_in_deck(event.x, event.y):
            self.draw_from_deck()
            return

        hit = self.layout.find_card(self.vm, event.x, event.y)
        if hit is None:
            return
        stack_id, card_idx = hit
        session = self.core.askBeginDrag(stack_id, card_idx)
        if session is None:
            self.message = "That card cannot be moved."
            self.request_redraw()
            return

        src_x, src_y = self.layout.card_position(stack_id, card_idx, self.vm)
        stack_cards = list(self.vm.stack(stack_id).cards[card_idx:card_idx + len(session.cards)])
        self.drag = DragState(
            src_stack=stack_id,
            src_idx=card_idx,
            token=session.token,
            cards=stack_cards,
            anchor_x=event.x - src_x,
            anchor_y=event.y - src_y,
            x=src_x,
            y=src_y,
        )
        self.hover_drop_stack = None
        self.hover_drop_valid = False
        self.message = f"Dragging {len(stack_cards)} card(s)..."
        self.spawn_spark_shower(src_x, src_y, 8)
        self.request_redraw()

    def on_right_click(self, event):
        if self.stage != GAME:
            return
        self.cancel_drag()

    def cancel_drag(self, quiet=False):
        if self.drag is None:
            return
        if self.core is not None:
            self.core.askCancelDrag()
        self.drag = None
        self.hover_drop_stack = None
        self.hover_drop_valid = False
        if not quiet:
            self.message = "Move cancelled."
        self.request_redraw()

    def on_drag(self, event):
        if self.stage != GAME or self.drag is None:
            return

        target_stack = self.layout.find_drop_stack(event.x, event.y)
        self.hover_drop_stack = target_stack
        self.hover_drop_valid = self.can_drop_to(target_stack)

        target_x = event.x - self.drag.anchor_x
        if self.hover_drop_valid and target_stack is not None:
            target_x, _ = self.layout.stack_origin(target_stack)

        self.drag.x = target_x
        self.drag.y = event.y - self.drag.anchor_y
        self.request_redraw()

    def on_release(self, event):
        if self.stage != GAME or self.drag is None:
            return

        released_drag = self.drag
        drop_stack = self.layout.find_drop_stack(event.x, event.y)
        self.drag = None
        self.hover_drop_stack = None
        self.hover_drop_valid = False

        if drop_stack is not None:
            self.pending_move_anim = {
                "src": released_drag.src_stack,
                "dest": drop_stack,
                "count": len(released_drag.cards),
                "release_x": released_drag.x,
                "release_y": released_drag.y,
            }
        moved = self.core.askDrop(drop_stack, released_drag.token)
        if drop_stack is None:
            self.message = "Move cancelled."
        elif not moved:
            self.pending_move_anim = None
            self.message = "That move is not allowed."
            sx, sy = self.layout.stack_origin(drop_stack)
            self.spawn_spark_shower(sx + self.layout.card_size()[0] * 0.5, sy + 20, 10)
        else:
            self.current_game_actions += 1
            sx, sy = self.layout.stack_origin(drop_stack)
            self.spawn_spark_shower(sx + self.layout.card_size()[0] * 0.5, sy + 20, 8)
        self.request_redraw()

    def can_drop_to(self, stack_id):
        if self.drag is None or stack_id is None:
            return False
        cards = [card.name for card in self.drag.cards]
        return self.core.canMove(cards, self.drag.src_stack, stack_id)

    def on_page_click(self, x, y):
        for button in self.active_buttons:
            x1, y1, x2, y2 = button["rect"]
            if x1 <= x <= x2 and y1 <= y <= y2:
                action = button["action"]
                if action == "new":
                    self.start_new_game()
                elif action == "seed":
                    self.prompt_and_start_seeded_game()
                elif action == "settings":
                    self.open_settings()
                elif action == "stats":
                    self.open_stats()
                elif action == "guide":
                    self.open_guide()
                elif action == "close_guide":
                    self.close_guide()
                elif action == "difficulty":
                    self.set_difficulty(self.cycle_value(DIFFICULTY_ORDER, self.difficulty))
                elif action == "theme":
                    self.theme_name = self.cycle_value(THEME_ORDER, self.theme_name)
                    self.refresh_card_faces()
                    self.persist_settings()
                elif action == "font_scale":
                    self.font_scale = self.cycle_value(FONT_SCALE_ORDER, self.font_scale)
                    self.refresh_card_faces()
                    self.persist_settings()
                elif action == "back_menu":
                    self.open_menu()
                self.request_redraw()
                return

    def tick(self):
        if self.stage == GAME and self.core is not None:
            if self.core.tick():
                self.request_redraw()
            if self.drag is not None and self.core.gesture.session is None:
                # the engine gave up on this gesture
                self.drag = None
                self.hover_drop_stack = None
                self.message = "Drag timed out."
                self.request_redraw()
        self.consume_animation_queue()
        self.update_effects()
        has_active_fx = bool(self.anim_cards or self.particles or self.clearing_slots)
        if self.needs_redraw or has_active_fx:
            self.draw()
            self.needs_redraw = False
        if self.root is not None:
            self.root.after(FPS_MS, self.tick)

    def format_stats_line(self, title, bucket):
        started = int(bucket["games_started"])
        won = int(bucket["games_won"])
        win_rate = (won / started * 100.0) if started > 0 else 0.0
        avg_actions = (bucket["total_actions"] / won) if won > 0 else 0.0
        avg_duration = (bucket["total_duration_sec"] / won) if won > 0 else 0.0
        return (
            f"{title}: played {started}, won {won}, lost {int(bucket['games_lost'])}, "
            f"win rate {win_rate:.1f}% | avg actions {avg_actions:.1f}, avg time {avg_duration:.1f}s | "
            f"streak {int(bucket['current_streak'])} (best {int(bucket['best_streak'])})"
        )

    def consume_animation_queue(self):
        now = time.time()
        if self.anim_cards:
            end_time = self.anim_start + self.anim_duration + max(c.delay for c in self.anim_cards)
            if now >= end_time:
                self.anim_cards.clear()
                self.request_redraw()
            return

        while self.anim_queue:
            evt = self.anim_queue.pop(0)
            if evt.type == "TOPIC_COMPLETE":
                sx, sy = self.layout.stack_origin(evt.payload["slot"])
                cw, _ = self.layout.card_size()
                self.spawn_firework_burst(sx + cw * 0.5, sy + 20, 24)
            elif evt.type == "TOPIC_CLEAR":
                self.clearing_slots.append(
                    ClearingSlot(slot=evt.payload["slot"], born=now, duration=self.CLEAR_FADE_DURATION)
                )
                sx, sy = self.layout.stack_origin(evt.payload["slot"])
                self.spawn_spark_shower(sx + self.layout.card_size()[0] * 0.5, sy + 30, 16)
            elif evt.type in ("MOVE", "DRAW"):
                self.anim_cards = self.build_anim_cards(evt)
                if self.anim_cards:
                    self.anim_start = now
                    self.request_redraw()
                    return

    def build_anim_cards(self, animation_event):
        if self.vm is None:
            return []
        cards = []
        if animation_event.type == "MOVE":
            src = animation_event.payload["src"]
            dest = animation_event.payload["dest"]
            count = animation_event.payload["count"]
            dest_cards = self.vm.stack(dest).cards
            dest_start = len(dest_cards) - count
            if dest_start < 0:
                return []

            override = self.pending_move_anim
            use_override = (
                override is not None
                and override["src"] == src
                and override["dest"] == dest
                and override["count"] == count
            )
            src_len = len(self.vm.stack(src).cards)
            for i in range(count):
                if use_override:
                    sx = override["release_x"]
                    sy = override["release_y"] + self.layout.visible_step(self.vm) * i
                else:
                    sx, sy = self.layout.card_position(src, src_len + i, self.vm)
                ex, ey = self.layout.card_position(dest, dest_start + i, self.vm)
                cards.append(
                    MovingCard(
                        card=dest_cards[dest_start + i],
                        start_x=sx,
                        start_y=sy,
                        end_x=ex,
                        end_y=ey,
                        suppress_stack=dest,
                        suppress_idx=dest_start + i,
                        delay=i * 0.02,
                    )
                )
            self.pending_move_anim = None

        elif animation_event.type == "DRAW":
            waste = self.vm.waste.cards
            if not waste:
                return []
            sx, sy = self.layout.deck_position()
            ex, ey = self.layout.stack_origin(WASTE_ID)
            cards.append(
                MovingCard(
                    card=waste[-1],
                    start_x=sx,
                    start_y=sy,
                    end_x=ex,
                    end_y=ey,
                    suppress_stack=WASTE_ID,
                    suppress_idx=len(waste) - 1,
                    delay=0.0,
                )
            )
        return cards

    def update_effects(self):
        now = time.time()
        alive = []
        for p in self.particles:
            if now - p.born > p.ttl:
                continue
            p.x += p.vx
            p.y += p.vy
            p.vy += 0.06
            p.vx *= 0.985
            p.vy *= 0.985
            alive.append(p)
        self.particles = alive
        self.clearing_slots = [cs for cs in self.clearing_slots if now - cs.born <= cs.duration]

    def draw(self):
        if self.canvas is None:
            return
        c = self.canvas
        c.delete("all")
        self.draw_background(c)

        if self.stage == MENU:
            self.draw_menu(c)
            return
        if self.stage == SETTINGS:
            self.draw_settings(c)
            return
        if self.stage == STATS:
            self.draw_stats(c)
            return
        if self.stage == GUIDE:
            self.draw_guide(c)
            return
        if self.vm is None:
            return

        suppressed = {(a.suppress_stack, a.suppress_idx) for a in self.anim_cards}
        if self.drag is not None:
            for i in range(len(self.drag.cards)):
                suppressed.add((self.drag.src_stack, self.drag.src_idx + i))

        self.draw_deck_and_hud(c)
        self.draw_waste(c, suppressed)
        for slot in self.vm.slots:
            self.draw_slot(c, slot, suppressed)
        for stack in self.vm.tableau:
            self.draw_tableau_stack(c, stack, suppressed)
        self.draw_clearing_slots(c)
        self.draw_active_cards(c)
        self.draw_drag_cards(c)
        self.draw_particles(c)
        if self.end_panel_visible:
            self.draw_end_overlay(c)

    def draw_background(self, c):
        theme = self.theme
        c.create_rectangle(0, 0, self.width, self.height, fill=theme["bg_base"], width=0)
        band_h = max(10, self.height // 18)
        for i in range(0, self.height + band_h, band_h):
            color = theme["bg_band_a"] if (i // band_h) % 2 == 0 else theme["bg_band_b"]
            c.create_rectangle(0, i, self.width, i + band_h, fill=color, width=0)

    def draw_button(self, c, label, action, fill, x1, y1, w, h):
        x2 = x1 + w
        y2 = y1 + h
        self.active_buttons.append({"action": action, "rect": (x1, y1, x2, y2)})
        c.create_rectangle(x1, y1, x2, y2, fill=fill, outline="#f8fafc", width=2)
        c.create_text((x1 + x2) / 2, (y1 + y2) / 2, text=label, fill="#f8fafc", font=f"Helvetica {self.fs(16)} bold")

    def draw_menu(self, c):
        theme = self.theme
        self.active_buttons = []

        c.create_text(self.width * 0.5, self.height * 0.2, text="Topic Solitaire", fill=theme["hud_text"],
                      font=f"Helvetica {self.fs(48)} bold")
        c.create_text(
            self.width * 0.5,
            self.height * 0.2 + 52,
            text="Gather every card of a topic onto its topic card before you run out of moves",
            fill=theme["hud_subtext"],
            font=f"Helvetica {self.fs(16)}",
        )

        bh = 58
        gap = 18
        bw = max(200, min(360, (self.width - 72 - gap) / 2))
        x_left = (self.width - (bw * 2 + gap)) / 2
        x_right = x_left + bw + gap
        row_top = int(self.height * 0.42)
        row_bot = row_top + bh + gap

        self.draw_button(c, "New Game", "new", "#0f766e", x_left, row_top, bw, bh)
        self.draw_button(c, "Play a Seed", "seed", "#1f2937", x_right, row_top, bw, bh)
        self.draw_button(c, "Statistics", "stats", "#0ea5e9", x_left, row_bot, bw, bh)
        self.draw_button(c, "Settings", "settings", "#7c3aed", x_right, row_bot, bw, bh)
        self.draw_button(c, "How to Play", "guide", "#b45309", (self.width - bw) / 2, row_bot + bh + gap, bw, bh)

        c.create_text(
            self.width * 0.5,
            row_top - self.fs(30),
            text=f"Difficulty: {self.difficulty_label()}",
            fill=theme["hud_subtext"],
            font=f"Helvetica {self.fs(14)}",
        )
        c.create_text(
            self.width * 0.5,
            self.height - 34,
            text="Keys: N new game, I seed, 1/2/3 difficulty, P statistics, S settings, ? guide",
            fill=theme["hud_subtext"],
            font=f"Helvetica {self.fs(13)}",
        )

    def draw_settings(self, c):
        theme = self.theme
        self.active_buttons = []

        c.create_text(self.width * 0.5, self.height * 0.16, text="Settings", fill=theme["hud_text"],
                      font=f"Helvetica {self.fs(42)} bold")

        bw = min(430, int(self.width * 0.34))
        bh = 64
        start_y = int(self.height * 0.32)
        gap = 20
        settings_defs = [
            (f"Difficulty: {self.difficulty_label()}", "difficulty", "#14532d"),
            (f"Theme: {self.theme_name}", "theme", "#9a3412"),
            (f"Font size: {self.font_scale}", "font_scale", "#0f766e"),
            ("Back to Menu", "back_menu", "#374151"),
        ]
        x1 = (self.width - bw) / 2 - bw * 0.25
        for i, (label, action, fill) in enumerate(settings_defs):
            self.draw_button(c, label, action, fill, x1, start_y + i * (bh + gap), bw, bh)

        # preview one topic card and one member card beside the buttons
        cw, ch = self.layout.card_size()
        px = x1 + bw + 40
        self.draw_card_face(c, px, start_y, "Fruits", True, False)
        self.draw_card_face(c, px, start_y + ch * 1.15, "Apple", False, False)

        c.create_text(
            self.width * 0.5,
            self.height - 26,
            text="Keys: 1/2/3 difficulty, B cycle difficulty, T theme, F font, Esc/M menu",
            fill=theme["hud_subtext"],
            font=f"Helvetica {self.fs(12)}",
        )

    def draw_stats(self, c):
        theme = self.theme
        self.active_buttons = []
        c.create_text(self.width * 0.5, self.height * 0.14, text="Statistics", fill=theme["hud_text"],
                      font=f"Helvetica {self.fs(42)} bold")

        lines = [self.format_stats_line("Overall", self.stats["overall"])]
        for difficulty in DIFFICULTY_ORDER:
            lines.append(self.format_stats_line(self.difficulty_label(difficulty), self.stats["by_difficulty"][difficulty]))

        y = self.height * 0.30
        for line in lines:
            c.create_text(40, y, anchor="nw", text=line, fill=theme["hud_text"], font=f"Helvetica {self.fs(12)}")
            y += self.fs(26)

        bw = min(360, int(self.width * 0.35))
        self.draw_button(c, "Back to Menu", "back_menu", "#374151", (self.width - bw) / 2, self.height * 0.78, bw, 58)
        c.create_text(
            self.width * 0.5,
            self.height - 24,
            text="Keys: P or Esc back to menu",
            fill=theme["hud_subtext"],
            font=f"Helvetica {self.fs(12)}",
        )

    def draw_guide(self, c):
        theme = self.theme
        self.active_buttons = []
        c.create_text(self.width * 0.5, self.height * 0.1, text="How to Play", fill=theme["hud_text"],
                      font=f"Helvetica {self.fs(38)} bold")

        left = max(40, self.width * 0.12)
        text_width = self.width - left * 2
        y = self.height * 0.2
        for heading, body in GUIDE_SECTIONS:
            c.create_text(left, y, anchor="nw", text=heading, fill=theme["slot_complete"],
                          font=f"Helvetica {self.fs(14)} bold")
            y += self.fs(22)
            c.create_text(left, y, anchor="nw", text=body, width=text_width, fill=theme["hud_text"],
                          font=f"Helvetica {self.fs(12)}")
            y += self.fs(30)

        # one member card next to its topic card, as they look on the board
        cw, ch = self.layout.card_size()
        px = self.width - left - cw * 2.2
        py = self.height * 0.84 - ch
        self.draw_card_face(c, px, py, "Fruits", True, False)
        self.draw_card_face(c, px + cw * 1.2, py, "Apple", False, False)

        label = "Back to Game" if self.guide_return_stage == GAME else "Back to Menu"
        bw = min(360, int(self.width * 0.3))
        self.draw_button(c, label, "close_guide", "#374151", left, self.height * 0.84, bw, 52)
        c.create_text(
            self.width * 0.5,
            self.height - 18,
            text="Keys: ? or Esc to go back, M menu",
            fill=theme["hud_subtext"],
            font=f"Helvetica {self.fs(12)}",
        )

    def draw_deck_and_hud(self, c):
        theme = self.theme
        deck_x, deck_y = self.layout.deck_position()
        cw, ch = self.layout.card_size()

        if self.vm.deck_count > 0:
            self.card_renderer.draw_card_back(c, deck_x, deck_y, cw, ch, theme, FONT_SCALE_FACTOR[self.font_scale])
            label = str(self.vm.deck_count)
        else:
            c.create_rectangle(deck_x, deck_y, deck_x + cw, deck_y + ch, fill=theme["deck_fill"],
                               outline=theme["deck_outline"], width=2)
            label = "shuffle" if self.vm.waste.cards else "empty"
        c.create_text(deck_x + cw / 2, deck_y + ch + 14, text=label, fill=theme["hud_text"],
                      font=f"Helvetica {self.fs(12)} bold")

        moves_color = theme["slot_invalid"] if self.vm.moves_left <= 10 else theme["hud_text"]
        c.create_text(16, 16, anchor="nw", text=f"Moves left: {self.vm.moves_left}", fill=moves_color,
                      font=f"Helvetica {self.fs(16)} bold")
        elapsed_sec = 0
        if self.current_game_started_at is not None:
            elapsed_sec = max(0, int(time.time() - self.current_game_started_at))
        c.create_text(
            16,
            42,
            anchor="nw",
            text=(
                f"Topics cleared: {self.vm.topics_cleared}/{self.vm.topics_total}  "
                f"{self.difficulty_label(self.vm.difficulty)}  "
                f"Time: {elapsed_sec // 60:02d}:{elapsed_sec % 60:02d}  Seed: {self.current_seed}"
            ),
            fill=theme["hud_subtext"],
            font=f"Helvetica {self.fs(12)}",
        )
        c.create_text(16, self.height - 20, anchor="sw", text=self.message, fill=theme["hud_subtext"],
                      font=f"Helvetica {self.fs(12)}")

    def draw_outline(self, c, stack_id, outline, width):
        sx, sy = self.layout.stack_origin(stack_id)
        cw, ch = self.layout.card_size()
        if self.drag is not None and self.hover_drop_stack == stack_id:
            outline = self.theme["slot_valid"] if self.hover_drop_valid else self.theme["slot_invalid"]
            width = 3
        c.create_rectangle(sx, sy, sx + cw, sy + ch, outline=outline, width=width, dash=(4, 2))

    def draw_waste(self, c, suppressed):
        self.draw_outline(c, WASTE_ID, self.theme["slot_outline"], 1)
        cards = self.vm.waste.cards
        # only the top two are ever visible
        for idx in range(max(0, len(cards) - 2), len(cards)):
            if (WASTE_ID, idx) in suppressed:
                continue
            x, y = self.layout.card_position(WASTE_ID, idx, self.vm)
            self.draw_card(c, x, y, cards[idx], selected=False)

    def draw_slot(self, c, slot, suppressed):
        theme = self.theme
        if slot.locked:
            self.draw_outline(c, slot.id, theme["slot_complete"], 3)
        else:
            self.draw_outline(c, slot.id, theme["slot_outline"], 1)
        for idx, card in enumerate(slot.cards):
            if (slot.id, idx) in suppressed:
                continue
            x, y = self.layout.card_position(slot.id, idx, self.vm)
            self.draw_card(c, x, y, card, selected=slot.locked and idx == 0)
        if slot.progress is not None:
            sx, _ = self.layout.stack_origin(slot.id)
            cw, ch = self.layout.card_size()
            _, last_y = self.layout.card_position(slot.id, max(0, len(slot.cards) - 1), self.vm)
            collected, needed = slot.progress
            color = theme["slot_complete"] if slot.locked else theme["hud_text"]
            c.create_text(sx + cw / 2, last_y + ch + 12, text=f"{collected}/{needed}", fill=color,
                          font=f"Helvetica {self.fs(12)} bold")

    def draw_tableau_stack(self, c, stack, suppressed):
        self.draw_outline(c, stack.id, self.theme["slot_outline"], 1)
        for idx, card in enumerate(stack.cards):
            if (stack.id, idx) in suppressed:
                continue
            x, y = self.layout.card_position(stack.id, idx, self.vm)
            if card.draggable:
                self.draw_card(c, x, y, card, selected=False)
            else:
                cw, ch = self.layout.card_size()
                self.card_renderer.draw_card_back(c, x, y, cw, ch, self.theme, FONT_SCALE_FACTOR[self.font_scale])

    def draw_clearing_slots(self, c):
        now = time.time()
        cw, ch = self.layout.card_size()
        for cs in self.clearing_slots:
            t = min(1.0, (now - cs.born) / cs.duration)
            sx, sy = self.layout.stack_origin(cs.slot)
            grow = 10 * t
            c.create_rectangle(sx - grow, sy - grow, sx + cw + grow, sy + ch + grow,
                               outline=self.theme["slot_complete"], width=max(1, int(4 * (1 - t))))

    def draw_active_cards(self, c):
        if not self.anim_cards:
            return
        elapsed = time.time() - self.anim_start
        for card in self.anim_cards:
            t = (elapsed - card.delay) / self.anim_duration
            if t < 0.0:
                continue
            t = min(1.0, t)
            eased = 1 - (1 - t) * (1 - t)
            x = card.start_x + (card.end_x - card.start_x) * eased
            y = card.start_y + (card.end_y - card.start_y) * eased
            self.draw_card(c, x, y, card.card, selected=False)

    def draw_drag_cards(self, c):
        if self.drag is None:
            return
        step = self.layout.visible_step(self.vm)
        cw, ch = self.layout.card_size()
        for i, card in enumerate(self.drag.cards):
            x = self.drag.x
            y = self.drag.y + i * step
            if i == 0:
                c.create_rectangle(x + 5, y + 5, x + cw + 5, y + ch + 5, fill="#000000", outline="")
            self.draw_card(c, x, y, card, selected=(i == 0))

    def draw_particles(self, c):
        now = time.time()
        for p in self.particles:
            t = (now - p.born) / p.ttl
            r = p.size * max(0.0, 1.0 - t)
            c.create_oval(p.x - r, p.y - r, p.x + r, p.y + r, fill=p.color, width=0)

    def draw_end_overlay(self, c):
        pw = min(self.width * 0.6, 640)
        ph = min(self.height * 0.5, 360)
        x1 = (self.width - pw) / 2
        y1 = (self.height - ph) / 2
        x2 = x1 + pw
        y2 = y1 + ph
        won = self.end_summary.get("won", False)
        c.create_rectangle(x1, y1, x2, y2, fill="#111827", outline="#f8fafc", width=2)
        title = "You Win!" if won else "Out of Moves"
        pulse = 1.0 + 0.05 * math.sin(time.time() * 6) if won else 1.0
        c.create_text((x1 + x2) / 2, y1 + 44, text=title, fill="#fde68a" if won else "#fca5a5",
                      font=f"Helvetica {max(18, int(self.fs(34) * pulse))} bold")

        lines = [
            f"Difficulty: {self.end_summary.get('difficulty', self.difficulty_label())}",
            f"Topics cleared: {self.end_summary.get('topics', '-')}",
            f"Actions: {self.end_summary.get('actions', 0)}",
            f"Time: {self.end_summary.get('duration_sec', 0.0):.1f} s",
        ]
        yy = y1 + 100
        for line in lines:
            c.create_text(x1 + 40, yy, anchor="nw", text=line, fill="#e5e7eb", font=f"Helvetica {self.fs(16)}")
            yy += self.fs(30)
        c.create_text((x1 + x2) / 2, y2 - 30, text="N new game | G replay seed | M menu", fill="#93c5fd",
                      font=f"Helvetica {self.fs(14)}")

    def card_image(self, name, is_topic):
        size = self.layout.card_pixel_size()
        key = (name, is_topic, size, self.theme_name, self.font_scale)
        image = self.face_images.get(key)
        if image is None:
            pil = self.card_renderer.render_card_image(name, is_topic, size, self.theme,
                                                       FONT_SCALE_FACTOR[self.font_scale])
            image = ImageTk.PhotoImage(pil)
            self.face_images[key] = image
        return image

    def draw_card_face(self, c, x, y, name, is_topic, selected):
        cw, ch = self.layout.card_size()
        self.card_renderer.draw_card(c, x, y, self.card_image(name, is_topic), selected, cw, ch, self.theme)

    def draw_card(self, c, x, y, card, selected):
        self.draw_card_face(c, x, y, card.name, card.is_topic, selected)

    def spawn_firework_burst(self, x, y, count):
        now = time.time()
        colors = self.theme["particle"]
        for _ in range(count):
            angle = self.fx_rng.uniform(0, math.tau)
            speed = self.fx_rng.uniform(1.8, 4.6)
            self.particles.append(
                Particle(
                    x=x,
                    y=y,
                    vx=math.cos(angle) * speed,
                    vy=math.sin(angle) * speed - 0.8,
                    born=now,
                    ttl=self.fx_rng.uniform(0.45, 0.9),
                    size=self.fx_rng.uniform(2.2, 4.4),
                    color=self.fx_rng.choice(colors),
                )
            )

    def spawn_spark_shower(self, x, y, count, speed=(0.8, 2.6), ttl=(0.25, 0.5)):
        now = time.time()
        colors = self.theme["particle"]
        for _ in range(count):
            angle = self.fx_rng.uniform(0, math.tau)
            mag = self.fx_rng.uniform(speed[0], speed[1])
            self.particles.append(
                Particle(
                    x=x + self.fx_rng.uniform(-6, 6),
                    y=y + self.fx_rng.uniform(-6, 6),
                    vx=math.cos(angle) * mag,
                    vy=math.sin(angle) * mag - 0.2,
                    born=now,
                    ttl=self.fx_rng.uniform(ttl[0], ttl[1]),
                    size=self.fx_rng.uniform(1.2, 3.4),
                    color=self.fx_rng.choice(colors),
                )
            )


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    ModernTkInterface().run()


if __name__ == "__main__":
    main()
