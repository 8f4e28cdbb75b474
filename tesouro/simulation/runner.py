"""Simulation runner and outcome reports."""

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from ..config import EngineConfig
from ..state.catalog import Catalog, default_catalog
from ..state.event_bus import EventBus
from ..state.schema import TurnPhase
from ..systems.turns import GameEngine
from ..tools.rng import SeededRandom
from .player import AutoPlayer

logger = logging.getLogger(__name__)

# Safety valve: commands per turn before a game is abandoned
MAX_COMMANDS_PER_TURN = 50


@dataclass
class GameOutcome:
    """How a single simulated game ended."""

    seed: int
    result: str                     # victory, game_over or timeout
    turns: int
    reason: str | None = None
    equilibrium: float = 0.0
    level: int = 1
    coins: int = 0
    disasters: int = 0
    cards_owned: int = 0
    dominant_profile: str = ""


@dataclass
class SimulationReport:
    """All outcomes for one persona/biome run."""

    persona: str = "balanced"
    biome: str = "floresta"
    max_turns: int = 30
    started_at: datetime = field(default_factory=datetime.now)
    outcomes: list[GameOutcome] = field(default_factory=list)

    @property
    def games(self) -> int:
        return len(self.outcomes)

    def rate(self, result: str) -> float:
        if not self.outcomes:
            return 0.0
        return sum(1 for o in self.outcomes if o.result == result) / len(self.outcomes)

    @property
    def average_turns(self) -> float:
        if not self.outcomes:
            return 0.0
        return sum(o.turns for o in self.outcomes) / len(self.outcomes)

    @property
    def average_equilibrium(self) -> float:
        if not self.outcomes:
            return 0.0
        return sum(o.equilibrium for o in self.outcomes) / len(self.outcomes)

    def to_dict(self) -> dict:
        return {
            "persona": self.persona,
            "biome": self.biome,
            "games": self.games,
            "max_turns": self.max_turns,
            "victory_rate": round(self.rate("victory"), 3),
            "game_over_rate": round(self.rate("game_over"), 3),
            "timeout_rate": round(self.rate("timeout"), 3),
            "average_turns": round(self.average_turns, 2),
            "average_equilibrium": round(self.average_equilibrium, 2),
            "profiles": dict(Counter(o.dominant_profile for o in self.outcomes)),
        }

    def to_markdown(self) -> str:
        """Convert the report to markdown."""
        summary = self.to_dict()
        lines = [
            "# Simulation Report",
            "",
            f"- **Date:** {self.started_at.strftime('%Y-%m-%d %H:%M:%S')}",
            f"- **Persona:** {self.persona}",
            f"- **Biome:** {self.biome}",
            f"- **Games:** {self.games} (max {self.max_turns} turns)",
            f"- **Victory rate:** {summary['victory_rate']:.1%}",
            f"- **Game over rate:** {summary['game_over_rate']:.1%}",
            f"- **Average turns:** {summary['average_turns']}",
            f"- **Average equilibrium:** {summary['average_equilibrium']}",
            "",
            "| Seed | Result | Turns | Equilibrium | Level | Disasters | Profile |",
            "|------|--------|-------|-------------|-------|-----------|---------|",
        ]
        for o in self.outcomes:
            lines.append(
                f"| {o.seed} | {o.result} | {o.turns} | {o.equilibrium:.1f} | "
                f"{o.level} | {o.disasters} | {o.dominant_profile} |"
            )
        lines.append("")
        return "\n".join(lines)

    def save(self, simulations_dir: Path) -> Path:
        """Save the report to file. Returns the file path."""
        simulations_dir.mkdir(parents=True, exist_ok=True)

        timestamp = self.started_at.strftime("%Y-%m-%d_%H%M%S")
        filepath = simulations_dir / f"sim_{timestamp}_{self.persona}_{self.biome}.md"
        filepath.write_text(self.to_markdown(), encoding="utf-8")
        return filepath


def play_game(
    engine: GameEngine,
    player: AutoPlayer,
    max_turns: int = 30,
) -> str:
    """
    Drive one engine until it ends or reaches max_turns.

    Returns:
        "victory", "game_over" or "timeout"
    """
    commands_this_turn = 0
    last_turn = engine.state.turn

    while not engine.phase.is_terminal and engine.state.turn < max_turns:
        state = engine.state
        if state.turn != last_turn:
            last_turn = state.turn
            commands_this_turn = 0
        commands_this_turn += 1
        if commands_this_turn > MAX_COMMANDS_PER_TURN:
            logger.warning(f"Abandoning game stuck on turn {state.turn} in {state.phase.value}")
            break

        if state.phase == TurnPhase.AWAITING_EVENT_CHOICE:
            engine.resolve_event(player.choose_event(state.pending_event))
        elif state.phase == TurnPhase.AWAITING_COUNCIL_CHOICE:
            engine.resolve_council(player.choose_council(state.pending_council))
        elif state.phase == TurnPhase.AWAITING_REWARD_PICK:
            pick = player.choose_reward(state.reward_offer or [], state)
            if pick is None:
                engine.skip_reward()
            else:
                engine.pick_reward(pick)
        else:
            index = player.choose_card(state)
            if index is None or not engine.play_card(index).accepted:
                engine.end_turn()

    if engine.phase == TurnPhase.VICTORY:
        return "victory"
    if engine.phase == TurnPhase.GAME_OVER:
        return "game_over"
    return "timeout"


def run_simulation(
    persona: str = "balanced",
    games: int = 10,
    max_turns: int = 30,
    seed: int = 0,
    biome: str | None = None,
    catalog: Catalog | None = None,
    config: EngineConfig | None = None,
) -> SimulationReport:
    """
    Play `games` seeded games with one persona.

    Game i uses seed + i for both the engine and the player, so a
    report is reproducible from its arguments.
    """
    catalog = catalog or default_catalog()
    config = config or EngineConfig()
    biome = biome or config.default_biome

    report = SimulationReport(persona=persona, biome=biome, max_turns=max_turns)

    for i in range(games):
        game_seed = seed + i
        engine = GameEngine(
            catalog=catalog,
            config=config,
            rng=SeededRandom(game_seed),
            bus=EventBus(),
            biome=biome,
        )
        player = AutoPlayer(persona, SeededRandom(game_seed + 1_000_003))
        result = play_game(engine, player, max_turns)

        state = engine.state
        report.outcomes.append(GameOutcome(
            seed=game_seed,
            result=result,
            turns=state.turn,
            reason=state.game_over_reason or state.victory_reason,
            equilibrium=engine.equilibrium,
            level=state.level,
            coins=state.coins,
            disasters=state.disaster_count,
            cards_owned=state.deck.owned_count,
            dominant_profile=engine.dominant_profile().value,
        ))
        logger.debug(f"Game {game_seed}: {result} after {state.turn} turns")

    return report
