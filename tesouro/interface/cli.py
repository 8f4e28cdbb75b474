"""
Interactive console game for Tesouro.

Short typed commands drive the engine; rich renders the state after
every accepted command.
"""

from rich.prompt import Prompt

from ..state.schema import TurnPhase
from ..state.schemas.result import CommandResult
from ..systems.turns import GameEngine
from .renderer import (
    THEME,
    console,
    show_alerts,
    show_banner,
    show_hand,
    show_help,
    show_pending,
    show_report,
    show_result,
    show_status,
)

QUIT = "quit"


def parse_index(args: list[str]) -> int | None:
    if not args:
        return None
    try:
        return int(args[0])
    except ValueError:
        return None


def dispatch(engine: GameEngine, line: str) -> CommandResult | str | None:
    """
    Run one typed command against the engine.

    Returns:
        CommandResult for engine commands, QUIT to leave, an error
        string for unusable input, or None for display-only commands
    """
    parts = line.strip().split()
    if not parts:
        return None
    verb, args = parts[0].lower(), parts[1:]

    if verb in ("q", "quit", "exit"):
        return QUIT
    if verb in ("h", "help", "?"):
        show_help()
        return None
    if verb == "report":
        show_report(engine.edu_report())
        return None
    if verb == "e":
        return engine.end_turn()
    if verb == "new":
        return engine.reset(args[0] if args else None)
    if verb == "b":
        if not args:
            return "Usage: b BIOME"
        return engine.set_biome(args[0])
    if verb == "r" and not args:
        return engine.skip_reward()

    index = parse_index(args)
    if index is None:
        return f"Unknown or incomplete command: {line.strip()}"

    if verb == "p":
        return engine.play_card(index)
    if verb == "d":
        return engine.discard_card(index)
    if verb == "r":
        return engine.pick_reward(index)
    if verb == "c":
        if engine.phase == TurnPhase.AWAITING_COUNCIL_CHOICE:
            return engine.resolve_council(index)
        return engine.resolve_event(index)
    return f"Unknown command: {verb}"


def render(engine: GameEngine):
    state = engine.state
    console.print()
    show_status(state)
    show_alerts(engine.alerts())
    if state.phase == TurnPhase.IDLE:
        show_hand(state)
    else:
        show_pending(state)


def run_cli(engine: GameEngine):
    """Main game loop."""
    show_banner()
    show_help()
    render(engine)

    while True:
        try:
            line = Prompt.ask(f"[{THEME['accent']}]>[/{THEME['accent']}]")
        except (EOFError, KeyboardInterrupt):
            break

        outcome = dispatch(engine, line)
        if outcome == QUIT:
            break
        if isinstance(outcome, str):
            console.print(f"[{THEME['warning']}]{outcome}[/{THEME['warning']}]")
            continue
        if outcome is None:
            continue

        show_result(outcome)
        if outcome.accepted:
            render(engine)
        if engine.phase.is_terminal:
            show_report(engine.edu_report())
            console.print(f"[{THEME['dim']}]Type 'new' to play again or 'q' to quit.[/{THEME['dim']}]")

    console.print(f"[{THEME['dim']}]Até logo![/{THEME['dim']}]")
