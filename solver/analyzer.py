from __future__ import annotations

import argparse
import heapq
import json
import logging
import sys
import time
from dataclasses import dataclass, replace
from typing import Iterable, Optional

from engine import Rules
from engine.Core import TABLEAU_IDS, TOPIC_SLOT_IDS, WASTE_ID, Core, GameConfig, initialMoveBudget
from engine.Interface import Interface
from engine.Topics import DIFFICULTIES, TopicCatalog

logger = logging.getLogger(__name__)

Pile = tuple[str, ...]
StateKey = tuple[Pile, Pile, tuple[Pile, ...], tuple[Pile, ...]]


@dataclass(frozen=True, slots=True)
class SolverState:
    """
    Immutable full-information position used by the solver.

    Completed topics leave the board at once; the clear delay of a live
    session has no effect on which moves are possible afterwards.
    """

    deck: Pile
    waste: Pile
    stacks: tuple[Pile, ...]
    slots: tuple[Pile, ...]
    moves_left: int
    cleared: int = 0


@dataclass(frozen=True, slots=True)
class Action:
    """A single player action in solver notation."""

    kind: str
    src: str = ""
    src_idx: int = -1
    dest: str = ""
    moved_len: int = 0

    def to_notation(self) -> str:
        if self.kind == "DRAW":
            return "DRAW"
        if self.kind == "RECYCLE":
            return "RECYCLE"
        return f"MOVE({self.src}:{self.src_idx}->{self.dest},len={self.moved_len})"


@dataclass(frozen=True, slots=True)
class SearchLimits:
    max_nodes: int = 60_000
    max_seconds: float = 2.0
    max_frontier: int = 300_000


@dataclass(slots=True)
class SolveResult:
    status: str
    stop_reason: str
    solution: tuple[Action, ...]
    expanded_nodes: int
    generated_nodes: int
    unique_states: int
    duplicate_states_skipped: int
    dead_end_nodes: int
    elapsed_ms: float
    max_depth: int
    solution_draws: int = 0
    solution_recycles: int = 0


@dataclass(slots=True)
class AnalyzeResult:
    status: str
    solvable: Optional[bool]
    metrics: dict
    seed: Optional[int] = None
    difficulty: Optional[str] = None
    topics: tuple[str, ...] = ()
    card_count: int = 0
    move_budget: int = 0
    solution: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "seed": self.seed,
            "difficulty": self.difficulty,
            "topics": list(self.topics),
            "card_count": self.card_count,
            "move_budget": self.move_budget,
            "status": self.status,
            "solvable": self.solvable,
            "metrics": self.metrics,
            "solution": list(self.solution),
        }


@dataclass(frozen=True, slots=True)
class _Transition:
    action: Action
    state: SolverState
    priority: int


def _canonical_state_key(state: SolverState) -> StateKey:
    """
    Canonical key for dedup:
    - keep deck and waste order (draw order matters)
    - sort tableau columns and slots to collapse permutation symmetry
    """
    return state.deck, state.waste, tuple(sorted(state.stacks)), tuple(sorted(state.slots))


def _is_goal(state: SolverState) -> bool:
    if state.deck or state.waste:
        return False
    return all(len(s) == 0 for s in state.stacks) and all(len(s) == 0 for s in state.slots)


def _pile(state: SolverState, pile_id: str) -> Pile:
    if pile_id == WASTE_ID:
        return state.waste
    if pile_id in TABLEAU_IDS:
        return state.stacks[TABLEAU_IDS.index(pile_id)]
    return state.slots[TOPIC_SLOT_IDS.index(pile_id)]


def _kind(pile_id: str) -> str:
    if pile_id == WASTE_ID:
        return Rules.WASTE
    if pile_id in TABLEAU_IDS:
        return Rules.TABLEAU
    return Rules.TOPIC_SLOT


def state_from_core(core: Core) -> SolverState:
    """Snapshot a live session; slots waiting to be cleared count as cleared already."""
    board = core.board
    slots = []
    cleared = len(core.cleared)
    for slot in board.topicSlots:
        if core.isSlotLocked(slot.id):
            cleared += len(slot)
            slots.append(())
        else:
            slots.append(tuple(slot.cards))
    return SolverState(
        deck=tuple(board.drawPile),
        waste=tuple(board.waste.cards),
        stacks=tuple(tuple(s.cards) for s in board.tableau),
        slots=tuple(slots),
        moves_left=core.movesLeft,
        cleared=cleared,
    )


def build_initial_state(config: GameConfig, catalog: TopicCatalog = None) -> tuple[SolverState, Core]:
    core = Core(catalog=catalog)
    core.registerInterface(Interface())
    core.startGame(config)
    return state_from_core(core), core


def _sources(state: SolverState, catalog: TopicCatalog):
    for i, stack in enumerate(state.stacks):
        for idx in range(len(stack)):
            if Rules.isDraggable(stack, idx, catalog):
                yield TABLEAU_IDS[i], idx, Rules.sequenceAt(list(stack), idx, catalog)
    if state.waste:
        yield WASTE_ID, len(state.waste) - 1, [state.waste[-1]]


def _apply_move(state: SolverState, src: str, src_idx: int, dest: str, cards, catalog) -> SolverState:
    stacks = list(state.stacks)
    slots = list(state.slots)
    waste = state.waste
    if src == WASTE_ID:
        waste = waste[:-1]
    else:
        i = TABLEAU_IDS.index(src)
        stacks[i] = stacks[i][:src_idx]

    cleared = state.cleared
    if dest in TABLEAU_IDS:
        i = TABLEAU_IDS.index(dest)
        stacks[i] = stacks[i] + tuple(cards)
    else:
        i = TOPIC_SLOT_IDS.index(dest)
        slot = slots[i] + tuple(cards)
        topic = Rules.slotTopic(slot, catalog)
        if topic is not None and Rules.isTopicComplete(topic, slot, catalog):
            cleared += len(slot)
            slot = ()
        slots[i] = slot
    return SolverState(
        deck=state.deck,
        waste=waste,
        stacks=tuple(stacks),
        slots=tuple(slots),
        moves_left=state.moves_left - 1,
        cleared=cleared,
    )


def _state_potential(state: SolverState, catalog: TopicCatalog) -> int:
    slotted = 0
    open_topics = 0
    for slot in state.slots:
        if slot:
            open_topics += 1
            slotted += len(slot)
    mixed = 0
    for stack in state.stacks:
        for i in range(1, len(stack)):
            if catalog.topicOf(stack[i]) != catalog.topicOf(stack[i - 1]):
                mixed += 1
    return state.cleared * 40 + slotted * 12 + open_topics * 6 - mixed * 2 - len(state.deck)


def _move_priority(state: SolverState, src: str, dest: str, moved_len: int, catalog) -> int:
    score = moved_len * 3
    if dest in TOPIC_SLOT_IDS:
        score += 30
    elif not _pile(state, dest):
        score -= 15
    if src == WASTE_ID:
        score += 4
    return score


def _is_immediate_reverse(last_action: Optional[Action], src: str, dest: str, moved_len: int) -> bool:
    if last_action is None or last_action.kind != "MOVE":
        return False
    return src == last_action.dest and dest == last_action.src and moved_len == last_action.moved_len


def _iter_transitions(state: SolverState, catalog: TopicCatalog,
                      last_action: Optional[Action] = None) -> list[_Transition]:
    if state.moves_left <= 0:
        return []
    transitions = []
    for src, idx, cards in _sources(state, catalog):
        for dest in TOPIC_SLOT_IDS + TABLEAU_IDS:
            target = _pile(state, dest)
            if not Rules.canDrop(cards, src, dest, _kind(dest), list(target), catalog):
                continue
            # lifting a whole column onto an empty one changes nothing
            if dest in TABLEAU_IDS and not target and src in TABLEAU_IDS and idx == 0:
                continue
            if _is_immediate_reverse(last_action, src, dest, len(cards)):
                continue
            action = Action(kind="MOVE", src=src, src_idx=idx, dest=dest, moved_len=len(cards))
            transitions.append(_Transition(
                action=action,
                state=_apply_move(state, src, idx, dest, cards, catalog),
                priority=_move_priority(state, src, dest, len(cards), catalog),
            ))

    if state.deck:
        drawn = replace(state, deck=state.deck[1:], waste=state.waste + (state.deck[0],),
                        moves_left=state.moves_left - 1)
        transitions.append(_Transition(action=Action(kind="DRAW"), state=drawn, priority=0))
    elif state.waste:
        # a live reshuffle is random; the solver recycles in order
        recycled = replace(state, deck=state.waste, waste=(), moves_left=state.moves_left - 1)
        transitions.append(_Transition(action=Action(kind="RECYCLE"), state=recycled, priority=-5))
    return transitions


def _reconstruct(goal: SolverState, parent: dict) -> tuple[Action, ...]:
    actions = []
    cur = goal
    while True:
        prev, action = parent[cur]
        if prev is None:
            break
        actions.append(action)
        cur = prev
    actions.reverse()
    return tuple(actions)


def solve_state(initial_state: SolverState, catalog: TopicCatalog,
                limits: SearchLimits = SearchLimits()) -> SolveResult:
    """Best-first search for a clearing sequence within the move budget."""

    start = time.perf_counter()
    parent: dict[SolverState, tuple[Optional[SolverState], Optional[Action]]] = {initial_state: (None, None)}
    seen_keys: set[StateKey] = {_canonical_state_key(initial_state)}
    frontier: list[tuple[int, int, int, SolverState]] = []
    counter = 0
    heapq.heappush(frontier, (-_state_potential(initial_state, catalog), counter, 0, initial_state))

    expanded = 0
    generated = 1
    dead_end = 0
    duplicates = 0
    max_depth = 0
    hit_limits = False

    def result(status, reason, solution=()):
        return SolveResult(
            status=status,
            stop_reason=reason,
            solution=solution,
            expanded_nodes=expanded,
            generated_nodes=generated,
            unique_states=len(seen_keys),
            duplicate_states_skipped=duplicates,
            dead_end_nodes=dead_end,
            elapsed_ms=(time.perf_counter() - start) * 1000.0,
            max_depth=max_depth,
            solution_draws=sum(1 for a in solution if a.kind == "DRAW"),
            solution_recycles=sum(1 for a in solution if a.kind == "RECYCLE"),
        )

    while frontier:
        if expanded >= limits.max_nodes or len(frontier) > limits.max_frontier:
            hit_limits = True
            break
        if (time.perf_counter() - start) >= limits.max_seconds:
            hit_limits = True
            break

        _, _, depth, state = heapq.heappop(frontier)
        if _is_goal(state):
            return result("solved", "goal_reached", _reconstruct(state, parent))

        transitions = _iter_transitions(state, catalog, last_action=parent[state][1])
        expanded += 1
        if not transitions:
            dead_end += 1
            continue

        for tr in transitions:
            key = _canonical_state_key(tr.state)
            if key in seen_keys:
                duplicates += 1
                continue
            seen_keys.add(key)
            parent[tr.state] = (state, tr.action)
            next_depth = depth + 1
            max_depth = max(max_depth, next_depth)
            counter += 1
            prio = next_depth * 2 - _state_potential(tr.state, catalog) - tr.priority
            heapq.heappush(frontier, (prio, counter, next_depth, tr.state))
            generated += 1

    if hit_limits:
        return result("unknown", "limits_reached")
    # the recycle model only covers one of the possible reshuffles
    return result("unknown", "search_space_exhausted")


def analyze_state(initial_state: SolverState, catalog: TopicCatalog,
                  limits: SearchLimits = SearchLimits()) -> AnalyzeResult:
    solved = solve_state(initial_state, catalog, limits)
    metrics = {
        "expanded_nodes": solved.expanded_nodes,
        "generated_nodes": solved.generated_nodes,
        "unique_states": solved.unique_states,
        "duplicate_states_skipped": solved.duplicate_states_skipped,
        "dead_end_nodes": solved.dead_end_nodes,
        "elapsed_ms": round(solved.elapsed_ms, 3),
        "max_depth": solved.max_depth,
        "reason": solved.stop_reason,
    }
    if solved.status == "solved":
        metrics.update({
            "solution_len": len(solved.solution),
            "solution_draws": solved.solution_draws,
            "solution_recycles": solved.solution_recycles,
            "moves_to_spare": initial_state.moves_left - len(solved.solution),
        })
        return AnalyzeResult(
            status="solved",
            solvable=True,
            metrics=metrics,
            solution=tuple(action.to_notation() for action in solved.solution),
        )
    return AnalyzeResult(status="unknown", solvable=None, metrics=metrics)


def analyze_deal(seed: int, difficulty: str = "easy", catalog: TopicCatalog = None,
                 limits: SearchLimits = SearchLimits()) -> AnalyzeResult:
    state, core = build_initial_state(GameConfig(difficulty=difficulty, seed=seed), catalog)
    result = analyze_state(state, core.catalog, limits)
    result.seed = seed
    result.difficulty = core.config.difficulty
    result.topics = tuple(topic.name for topic in core.topics)
    result.card_count = core.totalCards
    result.move_budget = initialMoveBudget(core.totalCards, core.config.difficulty)
    return result


def analyze_deals(seeds: Iterable[int], difficulty: str = "easy",
                  limits: SearchLimits = SearchLimits()) -> list[AnalyzeResult]:
    return [analyze_deal(seed=seed, difficulty=difficulty, limits=limits) for seed in seeds]


def _is_playable(core: Core, action: Action) -> bool:
    """Whether the live session accepts the action right now; locked slots refuse drops."""
    if action.kind == "DRAW":
        return len(core.board.drawPile) > 0
    if action.kind == "RECYCLE":
        return len(core.board.drawPile) == 0 and len(core.board.waste) > 0
    cards = core.sequenceAt(action.src, action.src_idx)
    return bool(cards) and core.canMove(cards, action.src, action.dest)


def hint(core: Core, limits: SearchLimits = SearchLimits(max_nodes=4000, max_seconds=0.5)) -> Optional[Action]:
    """
    Suggest the next action for a live session.

    Falls back to the most promising single step when the search cannot
    finish the game within its limits, or when its first step targets a slot
    that is still waiting to be cleared.
    """
    if not core.isPlaying():
        return None
    state = state_from_core(core)
    solved = solve_state(state, core.catalog, limits)
    if solved.status == "solved" and solved.solution and _is_playable(core, solved.solution[0]):
        return solved.solution[0]
    transitions = [tr for tr in _iter_transitions(state, core.catalog) if _is_playable(core, tr.action)]
    if not transitions:
        return None
    best = max(transitions, key=lambda tr: _state_potential(tr.state, core.catalog) + tr.priority)
    logger.debug("no playable solution in %d nodes, suggesting %s", solved.expanded_nodes, best.action.to_notation())
    return best.action


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Analyze topic solitaire deals for solvability.")
    parser.add_argument("--seed", type=int, action="append", required=True, help="Seed to analyze; can be repeated.")
    parser.add_argument("--difficulty", choices=DIFFICULTIES, default="easy", help="Topic tier.")
    parser.add_argument("--max-nodes", type=int, default=60_000, help="Search node limit.")
    parser.add_argument("--max-seconds", type=float, default=2.0, help="Search time limit in seconds.")
    parser.add_argument("--max-frontier", type=int, default=300_000, help="Search frontier size limit.")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print json output.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args()


def main() -> None:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    limits = SearchLimits(max_nodes=args.max_nodes, max_seconds=args.max_seconds, max_frontier=args.max_frontier)
    results = analyze_deals(args.seed, difficulty=args.difficulty, limits=limits)

    payload = [result.to_dict() for result in results]
    if len(payload) == 1:
        payload = payload[0]

    if args.pretty:
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        print(json.dumps(payload, ensure_ascii=False))


if __name__ == "__main__":
    main()
