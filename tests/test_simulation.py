"""Tests for seeded autoplay."""

import pytest

from tesouro.simulation import PERSONAS, AutoPlayer, play_game, run_simulation
from tesouro.simulation.personas import get_persona
from tesouro.state.schema import TurnPhase
from tesouro.tools.rng import ScriptedRandom, SeededRandom


class TestPersonas:
    def test_known_personas(self):
        assert set(PERSONAS) == {"balanced", "builder", "naturalist", "random"}

    def test_unknown_falls_back_to_balanced(self):
        assert get_persona("wizard") is PERSONAS["balanced"]


class TestAutoPlayer:
    """Persona choices."""

    def test_builder_prefers_infrastructure(self, build_state):
        state = build_state(hand=("plant_tree", "build_house", "town_meeting"))
        player = AutoPlayer("builder", ScriptedRandom([]))
        assert player.choose_card(state) == 1

    def test_naturalist_prefers_nature(self, build_state):
        state = build_state(hand=("build_house", "create_park", "town_meeting"))
        player = AutoPlayer("naturalist", ScriptedRandom([]))
        assert player.choose_card(state) == 1

    def test_stops_when_nothing_affordable(self, build_state):
        state = build_state(hand=("create_park",), coins=2)
        assert AutoPlayer("balanced", ScriptedRandom([])).choose_card(state) is None

    def test_stops_at_play_limit(self, build_state):
        state = build_state(cards_played_this_turn=3)
        assert AutoPlayer("balanced", ScriptedRandom([])).choose_card(state) is None

    def test_event_choice_order(self, catalog):
        storm = catalog.event("storm")
        assert AutoPlayer("balanced", ScriptedRandom([])).choose_event(storm) == 0
        assert AutoPlayer("builder", ScriptedRandom([])).choose_event(storm) == 1

    def test_council_stance_order(self, catalog):
        council = catalog.council("festa_praca")
        assert AutoPlayer("naturalist", ScriptedRandom([])).choose_council(council) == 0
        assert AutoPlayer("builder", ScriptedRandom([])).choose_council(council) == 1

    def test_stats(self, build_state):
        player = AutoPlayer("balanced", ScriptedRandom([]))
        player.choose_card(build_state())
        assert player.get_stats()["cards_played"] == 1


class TestRunSimulation:
    """Whole seeded games."""

    @pytest.mark.parametrize("persona", sorted(PERSONAS))
    def test_games_finish(self, persona, catalog, bus):
        from tesouro.systems.turns import GameEngine

        engine = GameEngine(catalog=catalog, rng=SeededRandom(9), bus=bus)
        result = play_game(engine, AutoPlayer(persona, SeededRandom(10)), max_turns=12)
        assert result in ("victory", "game_over", "timeout")
        assert engine.state.turn <= 12
        if result == "timeout":
            assert not engine.phase.is_terminal
        else:
            assert engine.phase in (TurnPhase.VICTORY, TurnPhase.GAME_OVER)

    def test_report(self, catalog):
        report = run_simulation("balanced", games=3, max_turns=8, seed=2, catalog=catalog)
        summary = report.to_dict()
        assert report.games == 3
        assert summary["persona"] == "balanced"
        assert summary["biome"] == "floresta"
        total = summary["victory_rate"] + summary["game_over_rate"] + summary["timeout_rate"]
        assert total == pytest.approx(1.0, abs=0.01)
        assert sum(summary["profiles"].values()) == 3

    def test_reproducible(self, catalog):
        first = run_simulation("random", games=2, max_turns=10, seed=4, catalog=catalog)
        second = run_simulation("random", games=2, max_turns=10, seed=4, catalog=catalog)
        assert first.to_dict() == second.to_dict()
        assert [o.turns for o in first.outcomes] == [o.turns for o in second.outcomes]

    def test_markdown_saved(self, catalog, tmp_path):
        report = run_simulation("naturalist", games=1, max_turns=5, biome="lagoa", catalog=catalog)
        path = report.save(tmp_path / "sims")
        text = path.read_text(encoding="utf-8")
        assert text.startswith("# Simulation Report")
        assert "lagoa" in path.name
