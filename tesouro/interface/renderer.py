"""
Display and rendering helpers for the Tesouro CLI.

Handles theming, the banner, status panels and result feeds.
"""

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from ..state.schema import GameState, Pillar, Rarity, TurnPhase
from ..state.schemas.result import CommandResult
from ..systems.resources import compute_equilibrium

# Shared console instance
console = Console()

# -----------------------------------------------------------------------------
# Theme
# -----------------------------------------------------------------------------

THEME = {
    "primary": "green3",        # headings
    "secondary": "grey85",      # body values
    "warning": "dark_goldenrod",
    "danger": "red3",
    "accent": "cyan",
    "dim": "dim",
}

PILLAR_STYLE = {
    Pillar.NATURE: ("green3", "Natureza"),
    Pillar.INFRASTRUCTURE: ("steel_blue", "Infraestrutura"),
    Pillar.GOVERNANCE: ("medium_purple", "Organização"),
}

RARITY_STYLE = {
    Rarity.COMMON: "grey70",
    Rarity.UNCOMMON: "green3",
    Rarity.RARE: "deep_sky_blue1",
    Rarity.LEGENDARY: "gold1",
}


def show_banner():
    banner = (
        f"[bold {THEME['primary']}]T E S O U R O[/bold {THEME['primary']}]\n"
        f"[{THEME['dim']}]Balance nature, infrastructure and governance.[/{THEME['dim']}]"
    )
    console.print(Panel(banner, expand=False, border_style=THEME["primary"]))


def bar(value: float, width: int = 20) -> str:
    """Text gauge for a 0-100 value."""
    filled = round(max(0.0, min(100.0, value)) / 100 * width)
    return "█" * filled + "░" * (width - filled)


def equilibrium_style(equilibrium: float) -> str:
    if equilibrium >= 60:
        return THEME["primary"]
    if equilibrium >= 30:
        return THEME["warning"]
    return THEME["danger"]


def show_status(state: GameState):
    """Bars, economy and turn counters."""
    equilibrium = compute_equilibrium(state.bars)

    table = Table(
        title=f"[bold {THEME['primary']}]Turn {state.turn} · {state.biome}[/bold {THEME['primary']}]",
        show_header=False,
        box=None,
    )
    table.add_column("Key", style=THEME["dim"])
    table.add_column("Value", style=THEME["secondary"])

    for pillar in Pillar:
        color, label = PILLAR_STYLE[pillar]
        value = state.bars.get(pillar)
        table.add_row(label, f"[{color}]{bar(value)}[/{color}] {value:.1f}")

    eq_style = equilibrium_style(equilibrium)
    table.add_row("Equilíbrio", f"[{eq_style}]{equilibrium:.1f}[/{eq_style}]")
    table.add_row("Moedas", f"{state.coins}")
    table.add_row("Nível", f"{state.level} ({state.xp} xp)")
    table.add_row("Visitantes", f"{state.visitors}")
    table.add_row("Jogadas", f"{state.cards_played_this_turn}/{state.max_plays_per_turn}")
    table.add_row("Desastres", f"{state.disaster_count}")
    table.add_row(
        "Baralho",
        f"compra {len(state.deck.draw_pile)} · descarte {len(state.deck.discard_pile)} "
        f"· exaustas {len(state.deck.exhaust_pile)}",
    )
    console.print(table)


def show_hand(state: GameState):
    table = Table(title="Mão", box=None)
    table.add_column("#", style=THEME["dim"], justify="right")
    table.add_column("Carta")
    table.add_column("Custo", justify="right")
    table.add_column("N", justify="right")
    table.add_column("I", justify="right")
    table.add_column("O", justify="right")

    for i, card in enumerate(state.deck.hand):
        style = RARITY_STYLE[card.rarity]
        cost_style = THEME["danger"] if card.cost > state.coins else THEME["secondary"]
        name = f"{card.emoji} [{style}]{card.name}[/{style}]"
        if card.exhaust:
            name += f" [{THEME['dim']}](exaure)[/{THEME['dim']}]"
        table.add_row(
            str(i),
            name,
            f"[{cost_style}]{card.cost}[/{cost_style}]",
            f"{card.effects.nature:+g}",
            f"{card.effects.infrastructure:+g}",
            f"{card.effects.governance:+g}",
        )
    console.print(table)


def show_pending(state: GameState):
    """The interaction waiting for an answer, if any."""
    if state.phase == TurnPhase.AWAITING_EVENT_CHOICE and state.pending_event:
        event = state.pending_event
        console.print(Panel(
            f"{event.description}",
            title=f"{event.emoji} {event.name}",
            border_style=THEME["warning"],
            expand=False,
        ))
        for i, choice in enumerate(event.choices):
            console.print(f"  [{THEME['accent']}]{i}[/{THEME['accent']}] {choice.emoji} {choice.label} "
                          f"[{THEME['dim']}]({choice.type.value})[/{THEME['dim']}]")

    elif state.phase == TurnPhase.AWAITING_COUNCIL_CHOICE and state.pending_council:
        council = state.pending_council
        console.print(Panel(
            council.question,
            title=f"{council.emoji} Conselho",
            border_style=THEME["accent"],
            expand=False,
        ))
        for i, option in enumerate(council.options):
            console.print(f"  [{THEME['accent']}]{i}[/{THEME['accent']}] {option.label}")

    elif state.phase == TurnPhase.AWAITING_REWARD_PICK and state.reward_offer:
        console.print(f"[bold {THEME['primary']}]Escolha uma carta nova:[/bold {THEME['primary']}]")
        for i, card in enumerate(state.reward_offer):
            style = RARITY_STYLE[card.rarity]
            console.print(
                f"  [{THEME['accent']}]{i}[/{THEME['accent']}] {card.emoji} "
                f"[{style}]{card.name}[/{style}] ({card.cost}) {card.description}"
            )


def show_result(result: CommandResult):
    if not result.accepted:
        console.print(f"[{THEME['warning']}]Not allowed: {result.reason}[/{THEME['warning']}]")
        return
    for line in result.summary:
        console.print(f"[{THEME['secondary']}]{line}[/{THEME['secondary']}]")


def show_alerts(alerts: list[str]):
    for alert in alerts:
        console.print(f"[bold {THEME['danger']}]! {alert}[/bold {THEME['danger']}]")


def show_report(report: dict):
    """End-of-game summary."""
    table = Table(title="Relatório", show_header=False, box=None)
    table.add_column("Key", style=THEME["dim"])
    table.add_column("Value", style=THEME["secondary"])
    table.add_row("Turnos", str(report["turn"]))
    table.add_row("Equilíbrio", str(report["equilibrium"]))
    table.add_row("Perfil", report["dominant_profile"])
    table.add_row("Tendência", report["tendency"])
    table.add_row("Cartas jogadas", str(report["total_cards_played"]))
    table.add_row("Pontos", f"{report['total_score']:g}")
    table.add_row("Desastres", str(report["disaster_count"]))
    console.print(table)


def show_help():
    """Show available commands."""
    help_text = """
## Commands

| Command | Description |
|---------|-------------|
| `p N` | Play card N from hand |
| `d N` | Discard card N (+1 coin) |
| `e` | End the turn |
| `c N` | Answer the pending event or council with option N |
| `r N` / `r` | Take reward N, or skip the reward |
| `b BIOME` | Switch biome |
| `new [BIOME]` | Start a new game |
| `report` | Show the play-style report |
| `q` | Quit |
"""
    console.print(Markdown(help_text))
