import argparse
import logging
import sys

from engine.Core import TABLEAU_IDS, TOPIC_SLOT_IDS, WASTE_ID, Core, GameConfig
from engine.Interface import Interface
from engine.Rules import topicProgress
from engine.Topics import DIFFICULTIES

HELP = """commands:
  d | draw                 draw a card onto the waste
  r | shuffle              turn the waste back into the deck (deck must be empty)
  mv <src> [idx] <dest>    move from a stack (s1-s4, w) to a stack (t1-t4, s1-s4);
                           idx is the card position in the stack, default is the top card
  moves                    list legal moves
  new [difficulty]         start over
  q | quit"""

ALIASES = {"w": WASTE_ID}
ALIASES.update({f"t{i + 1}": sid for i, sid in enumerate(TOPIC_SLOT_IDS)})
ALIASES.update({f"s{i + 1}": sid for i, sid in enumerate(TABLEAU_IDS)})
SHORT = {v: k for k, v in ALIASES.items()}


def cardStr(core, card):
    if core.isTopicCard(card):
        return f"[{card}]"
    return card


class CommandLineInterface(Interface):

    def printAll(self):
        core = self.core
        board = core.board
        print(f"Moves left: {core.movesLeft}        Deck: {len(board.drawPile)}        Status: {core.status.value}")
        for slot in board.topicSlots:
            progress = topicProgress(slot.cards, core.catalog)
            label = f" ({progress[0]}/{progress[1]})" if progress else ""
            locked = " *complete*" if core.isSlotLocked(slot.id) else ""
            print(f"{SHORT[slot.id]}: {' '.join(cardStr(core, c) for c in slot.cards)}{label}{locked}")
        print("-" * 40)
        for stack in board.tableau:
            line = []
            for i, card in enumerate(stack.cards):
                shown = cardStr(core, card) if core.isDraggable(stack.id, i) else "##"
                line.append(f"{i}:{shown}")
            print(f"{SHORT[stack.id]}: {'  '.join(line)}")
        top = board.waste.top()
        print(f"w : {cardStr(core, top) if top else '-'}  ({len(board.waste)} drawn)")
        print()

    def onStart(self):
        print("Game started!")
        self.printAll()

    def onWin(self):
        print("You win!")

    def onLose(self):
        print("Out of moves. Game over!")


def parseStack(text):
    return ALIASES.get(text.lower(), text)


def runCommand(core: Core, ui: CommandLineInterface, command: str) -> bool:
    """Execute one line of input; returns False when the session should stop."""
    parts = command.split()
    if not parts:
        return True
    name = parts[0].lower()
    if name in ("q", "quit", "exit"):
        return False
    if name in ("h", "help", "?"):
        print(HELP)
    elif name in ("d", "draw"):
        if not core.askDraw():
            print("No card left in the deck!")
    elif name in ("r", "shuffle"):
        if not core.askReshuffle():
            print("Cannot shuffle now!")
    elif name == "mv":
        if len(parts) not in (3, 4):
            print("Usage: mv <src> [idx] <dest>")
            return True
        src = parseStack(parts[1])
        dest = parseStack(parts[-1])
        stack = core.stack(src)
        if stack is None:
            print("Invalid stack!")
            return True
        try:
            idx = int(parts[2]) if len(parts) == 4 else len(stack) - 1
        except ValueError:
            print("Invalid index!")
            return True
        if not core.askMove(src, idx, dest):
            print("Cannot move!")
    elif name == "moves":
        moves = core.legalMoves()
        if not moves:
            print("No moves on the board.")
        for src, idx, dest in moves:
            print(f"mv {SHORT[src]} {idx} {SHORT[dest]}")
        return True
    elif name == "new":
        difficulty = parts[1] if len(parts) > 1 else core.config.difficulty
        core.startGame(GameConfig(difficulty=difficulty))
        return True
    else:
        print("Invalid command! Type 'help' for the list.")
        return True
    core.tick()
    ui.printAll()
    return True


def parseArgs(argv=None):
    parser = argparse.ArgumentParser(description="Play topic solitaire in the terminal.")
    parser.add_argument("--difficulty", choices=DIFFICULTIES, default="easy", help="Topic tier and move budget.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible deal.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def main(argv=None):
    args = parseArgs(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    interface = CommandLineInterface()
    core = Core()
    core.registerInterface(interface)
    core.startGame(GameConfig(difficulty=args.difficulty, seed=args.seed))
    print(HELP)
    while True:
        try:
            command = input("> ")
        except EOFError:
            break
        core.tick()
        if not runCommand(core, interface, command):
            break
    pass


if __name__ == '__main__':
    main()
