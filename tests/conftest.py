"""
Pytest fixtures for Tesouro engine tests.

Provides the bundled catalog, scripted random sources, a private event
bus per test and builders for hand-made game states.
"""

import pytest

from tesouro.config import EngineConfig
from tesouro.state import (
    Bars,
    DeckState,
    EventBus,
    GameState,
    MemorySessionStore,
    default_catalog,
    reset_event_bus,
)
from tesouro.systems.turns import GameEngine
from tesouro.tools.rng import ScriptedRandom, SeededRandom


@pytest.fixture(autouse=True)
def fresh_global_bus():
    """Keep the global bus from leaking listeners between tests."""
    reset_event_bus()
    yield
    reset_event_bus()


@pytest.fixture
def catalog():
    """The bundled catalog."""
    return default_catalog()


@pytest.fixture
def config():
    return EngineConfig()


@pytest.fixture
def bus():
    """Private event bus."""
    return EventBus()


@pytest.fixture
def scripted():
    """Factory for ScriptedRandom; exhausted scripts keep returning 0.0."""
    def _make(*values: float, fallback: float = 0.0) -> ScriptedRandom:
        return ScriptedRandom(list(values), fallback=fallback)
    return _make


@pytest.fixture
def seeded():
    return SeededRandom(1234)


@pytest.fixture
def memory_store():
    """In-memory session store for testing."""
    return MemorySessionStore()


@pytest.fixture
def build_state(catalog):
    """
    Factory for a GameState with a known deck.

    Cards are given as catalog ids. Any other GameState field can be
    passed as a keyword.
    """
    def _build(
        hand=("plant_tree",) * 5,
        draw=("plant_tree",) * 7,
        discard=(),
        exhaust=(),
        bars=(50, 30, 30),
        **fields,
    ) -> GameState:
        deck = DeckState(
            draw_pile=catalog.cards_by_ids(draw),
            hand=catalog.cards_by_ids(hand),
            discard_pile=catalog.cards_by_ids(discard),
            exhaust_pile=catalog.cards_by_ids(exhaust),
        )
        nature, infrastructure, governance = bars
        return GameState(
            bars=Bars(nature=nature, infrastructure=infrastructure, governance=governance),
            deck=deck,
            **fields,
        )
    return _build


@pytest.fixture
def make_engine(catalog, config, bus):
    """
    Factory for a GameEngine wired to the private bus.

    Keyword overrides that name EngineConfig fields replace those
    fields; the default random source is an empty script (always 0.0).
    """
    def _make(rng=None, biome=None, state=None, **overrides) -> GameEngine:
        cfg = config.model_copy(update=overrides) if overrides else config
        return GameEngine(
            catalog=catalog,
            config=cfg,
            rng=rng or ScriptedRandom([]),
            bus=bus,
            biome=biome,
            state=state,
        )
    return _make
