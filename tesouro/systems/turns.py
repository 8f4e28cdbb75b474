"""
Turn engine for the Tesouro deck game.

Owns the game snapshot and the phase state machine:

    IDLE ──end_turn──> AWAITING_EVENT_CHOICE ──resolve_event──┐
      │                AWAITING_COUNCIL_CHOICE ─resolve_council┤
      │                                                        v
      │<──────────pick_reward / skip_reward── AWAITING_REWARD_PICK
      └──end_turn──> GAME_OVER | VICTORY   (absorbing; only reset leaves)

Every command runs against a deep copy of the snapshot and commits it
only when the whole command succeeded, so a call either fully applies or
changes nothing. Invalid player input never raises: it returns a rejected
CommandResult with a reason code. Bus events go out after the commit.

Usage:
    engine = GameEngine(rng=SeededRandom(7))
    engine.play_card(0)
    result = engine.end_turn()
    if engine.phase == TurnPhase.AWAITING_EVENT_CHOICE:
        engine.resolve_event(0)
        engine.pick_reward(0)
"""

from __future__ import annotations

import logging

from ..config import EngineConfig
from ..state.catalog import Catalog, default_catalog
from ..state.event_bus import EventBus, EventType, get_event_bus
from ..state.schema import (
    Bars,
    Effect,
    GameState,
    Pillar,
    ProfileAxis,
    TurnPhase,
    round_half_up,
)
from ..state.schemas.event import TurnEvent
from ..state.schemas.result import CommandResult
from ..tools.rng import RandomSource, SeededRandom, choose, shuffle
from . import deck as deck_manager
from . import profile
from .resolver import Resolution, resolve_council_option, resolve_event_choice
from .resources import (
    Economy,
    adjust_coins,
    apply_effect,
    compute_equilibrium,
    compute_income,
    compute_visitors,
    grant_experience,
)
from .rewards import pick_random_cards, pick_reward_pool

logger = logging.getLogger(__name__)


# Valid phase transitions. Terminal phases have none; reset() rebuilds
# the state instead of transitioning.
VALID_TRANSITIONS: dict[TurnPhase, set[TurnPhase]] = {
    TurnPhase.IDLE: {
        TurnPhase.AWAITING_EVENT_CHOICE,
        TurnPhase.AWAITING_COUNCIL_CHOICE,
        TurnPhase.GAME_OVER,
        TurnPhase.VICTORY,
    },
    TurnPhase.AWAITING_EVENT_CHOICE: {TurnPhase.AWAITING_REWARD_PICK, TurnPhase.IDLE},
    TurnPhase.AWAITING_COUNCIL_CHOICE: {TurnPhase.AWAITING_REWARD_PICK, TurnPhase.IDLE},
    TurnPhase.AWAITING_REWARD_PICK: {TurnPhase.IDLE},
    TurnPhase.GAME_OVER: set(),
    TurnPhase.VICTORY: set(),
}

# Rejection reason codes
GAME_FINISHED = "game_finished"
WRONG_PHASE = "wrong_phase"
INVALID_INDEX = "invalid_index"
PLAYS_EXHAUSTED = "plays_exhausted"
INSUFFICIENT_COINS = "insufficient_coins"
UNKNOWN_BIOME = "unknown_biome"

# Terminal reason codes
EQUILIBRIUM_COLLAPSE = "equilibrium_collapse"
TOO_MANY_DISASTERS = "too_many_disasters"
BALANCED_PROSPERITY = "balanced_prosperity"


class EngineError(Exception):
    """Engine invariant broken. Never caused by player input."""
    pass


class InvalidPhaseError(EngineError):
    """Attempted phase edge not in VALID_TRANSITIONS."""
    def __init__(self, current: TurnPhase, attempted: TurnPhase):
        self.current = current
        self.attempted = attempted
        super().__init__(
            f"Cannot move from {current.value} to {attempted.value}."
        )


class _Pending:
    """Log entries and bus events collected while a command runs."""

    def __init__(self):
        self.events: list[TurnEvent] = []
        self.emits: list[tuple[EventType, dict]] = []


class GameEngine:
    """
    The deck game state machine.

    Collaborators are injected: the catalog (static data), a config
    (numeric constants), a RandomSource (all randomness) and an EventBus
    (observers). Defaults are the bundled catalog, default config, an
    unseeded SeededRandom and the global bus.
    """

    def __init__(
        self,
        catalog: Catalog | None = None,
        config: EngineConfig | None = None,
        rng: RandomSource | None = None,
        bus: EventBus | None = None,
        biome: str | None = None,
        state: GameState | None = None,
        session_id: str = "",
    ):
        self.catalog = catalog or default_catalog()
        self.config = config or EngineConfig()
        self.rng = rng or SeededRandom()
        self._bus = bus or get_event_bus()
        self.session_id = session_id

        if state is not None:
            self._state = state.model_copy(deep=True)
        else:
            biome_id = biome or self.config.default_biome
            # Unknown biome at construction raises CatalogError
            self._state = self._new_state(self.catalog.biome(biome_id).id)

    @classmethod
    def from_snapshot(cls, data: dict, **kwargs) -> "GameEngine":
        """Rebuild an engine from a snapshot() dict."""
        return cls(state=GameState.model_validate(data), **kwargs)

    # ─── Queries ─────────────────────────────────────────────────

    @property
    def state(self) -> GameState:
        """Deep copy of the current state; mutating it changes nothing."""
        return self._state.model_copy(deep=True)

    @property
    def phase(self) -> TurnPhase:
        return self._state.phase

    @property
    def equilibrium(self) -> float:
        return compute_equilibrium(self._state.bars)

    @property
    def state_version(self) -> int:
        return self._state.state_version

    def snapshot(self) -> dict:
        """Plain JSON-compatible dict of the whole state."""
        data = self._state.model_dump(mode="json")
        data["equilibrium"] = round(self.equilibrium, 2)
        data["is_game_over"] = self._state.is_game_over
        data["is_victory"] = self._state.is_victory
        return data

    def alerts(self) -> list[str]:
        return profile.alerts(self._state, self.config.overdevelopment_gap)

    def dominant_profile(self) -> ProfileAxis:
        return profile.dominant_profile(self._state.profile_scores, self.equilibrium)

    def edu_report(self) -> dict:
        return profile.edu_report(self._state)

    # ─── Commands: cards ─────────────────────────────────────────

    def play_card(self, index: int) -> CommandResult:
        """
        Play the card at `index` in hand.

        Rejected when not idle, when the per-turn play limit is reached,
        on a bad index, or when the card costs more than the coins held.
        """
        command = "play_card"
        rejection = self._require_phase(command, TurnPhase.IDLE)
        if rejection:
            return rejection
        current = self._state
        if current.cards_played_this_turn >= current.max_plays_per_turn:
            return self._reject(command, PLAYS_EXHAUSTED)
        if not 0 <= index < len(current.deck.hand):
            return self._reject(command, INVALID_INDEX)
        card = current.deck.hand[index]
        if card.cost > current.coins:
            return self._reject(command, INSUFFICIENT_COINS)

        work = current.model_copy(deep=True)
        pending = _Pending()
        cfg = self.config

        work.deck, played = deck_manager.play_card(work.deck, index)
        work.bars = self._apply(work.bars, played.effects)
        work.coins = adjust_coins(work.coins, played.effects.coins - played.cost)

        equilibrium = compute_equilibrium(work.bars)
        xp_gain = max(cfg.min_xp_gain, round_half_up(equilibrium / 10)) + played.effects.xp
        self._grant_xp(work, xp_gain, pending)

        work.cards_played_this_turn += 1
        work.played_this_turn.append(played)
        work.total_cards_played += 1
        card_score = played.effects.positive_total
        work.total_score += card_score

        delta = profile.score_card_play(
            played,
            cfg.category_profile_increment,
            cfg.balanced_profile_increment,
            cfg.category_profiles,
        )
        work.profile_scores = profile.add_scores(work.profile_scores, delta)
        work.edu_metrics = profile.record_card_play(
            work.edu_metrics, played, work, cfg.overdevelopment_gap
        )
        work.visitors = compute_visitors(equilibrium, cfg.visitor_multiplier)

        self._record(
            work, pending, EventType.CARD_PLAYED,
            f"Played {played.emoji} {played.name} (+{card_score:g} pts)",
            card_id=played.id,
            cost=played.cost,
            xp_gain=xp_gain,
            exhausted=played.exhaust,
        )
        return self._commit(command, work, pending)

    def discard_card(self, index: int) -> CommandResult:
        """Discard the card at `index` for a small coin rebate."""
        command = "discard_card"
        rejection = self._require_phase(command, TurnPhase.IDLE)
        if rejection:
            return rejection
        if not 0 <= index < len(self._state.deck.hand):
            return self._reject(command, INVALID_INDEX)

        work = self._state.model_copy(deep=True)
        pending = _Pending()
        work.deck, card = deck_manager.discard_card(work.deck, index)
        work.coins = adjust_coins(work.coins, self.config.discard_rebate)

        self._record(
            work, pending, EventType.CARD_DISCARDED,
            f"Discarded {card.emoji} {card.name} (+{self.config.discard_rebate} coins)",
            card_id=card.id,
            rebate=self.config.discard_rebate,
        )
        return self._commit(command, work, pending)

    # ─── Commands: turn pipeline ─────────────────────────────────

    def end_turn(self) -> CommandResult:
        """
        Close the turn: decay, income, disaster, redraw, termination,
        then maybe schedule an event or council for the next turn.
        """
        command = "end_turn"
        rejection = self._require_phase(command, TurnPhase.IDLE)
        if rejection:
            return rejection

        work = self._state.model_copy(deep=True)
        pending = _Pending()
        cfg = self.config

        # 1. Decay
        decay = Effect(**{pillar.value: -amount for pillar, amount in cfg.decay.items()})
        work.bars = self._apply(work.bars, decay)

        # 2. Income from the visitors carried into this turn
        income = compute_income(work.visitors, cfg.income_divisor, cfg.income_base)
        work.coins = adjust_coins(work.coins, income)

        # 3. Disasters: first match in catalog order, at most one
        for disaster in self.catalog.disasters:
            if disaster.trigger.holds(work.bars):
                work.bars = self._apply(work.bars, disaster.effects)
                work.coins = adjust_coins(work.coins, disaster.effects.coins)
                work.disaster_count += 1
                logger.info(
                    f"Disaster {disaster.id} on turn {work.turn + 1} "
                    f"({work.disaster_count} so far)"
                )
                self._record(
                    work, pending, EventType.DISASTER_TRIGGERED,
                    f"{disaster.emoji} {disaster.name}: {disaster.description}",
                    disaster_id=disaster.id,
                    disaster_count=work.disaster_count,
                )
                break

        # 4. Redraw and advance
        work.deck, reshuffled = deck_manager.draw_for_turn(
            work.deck, self.rng, cfg.discard_unplayed_on_redraw
        )
        if reshuffled:
            logger.info(f"Deck reshuffled: {len(work.deck.draw_pile) + len(work.deck.hand)} cards")
            self._record(
                work, pending, EventType.DECK_RESHUFFLED, "Deck reshuffled",
                draw_pile=len(work.deck.draw_pile),
            )
        work.cards_played_this_turn = 0
        work.played_this_turn = []
        work.turn += 1

        equilibrium = compute_equilibrium(work.bars)
        work.edu_metrics = profile.record_turn_health(work.edu_metrics, equilibrium)
        self._record(
            work, pending, EventType.TURN_ENDED,
            f"Turn {work.turn}: +{income} coins, equilibrium {equilibrium:.1f}",
            income=income,
            visitors=work.visitors,
            equilibrium=round(equilibrium, 2),
        )

        # 5. Termination, judged on the visitors carried into the turn
        self._check_termination(work, equilibrium, pending)
        work.visitors = compute_visitors(equilibrium, cfg.visitor_multiplier)

        # 6. Scheduling
        if not work.phase.is_terminal and cfg.is_event_turn(work.turn):
            self._schedule_interaction(work, pending)

        return self._commit(command, work, pending)

    def _check_termination(self, work: GameState, equilibrium: float, pending: _Pending) -> None:
        cfg = self.config
        reason = None
        if equilibrium <= cfg.game_over_equilibrium:
            reason = EQUILIBRIUM_COLLAPSE
        elif work.disaster_count >= cfg.game_over_disasters:
            reason = TOO_MANY_DISASTERS

        if reason:
            self._transition(work, TurnPhase.GAME_OVER)
            work.game_over_reason = reason
            logger.info(f"Game over on turn {work.turn}: {reason}")
            self._record(
                work, pending, EventType.GAME_OVER, f"Game over: {reason}",
                reason=reason,
                equilibrium=round(equilibrium, 2),
                disaster_count=work.disaster_count,
            )
            return

        if (
            work.level >= cfg.victory_level
            and equilibrium >= cfg.victory_equilibrium
            and all(work.bars.get(p) >= cfg.victory_pillar_minimum for p in Pillar)
            and work.visitors >= cfg.victory_visitors
        ):
            self._transition(work, TurnPhase.VICTORY)
            work.victory_reason = BALANCED_PROSPERITY
            logger.info(f"Victory on turn {work.turn}")
            self._record(
                work, pending, EventType.VICTORY, "Victory: a balanced, thriving town!",
                reason=BALANCED_PROSPERITY,
                equilibrium=round(equilibrium, 2),
                visitors=work.visitors,
            )

    def _schedule_interaction(self, work: GameState, pending: _Pending) -> None:
        """Roll for a council (below council_probability) or else an event."""
        if self.rng.next() < self.config.council_probability:
            councils = [c for c in self.catalog.councils if c.is_eligible(work.bars)]
            if not councils:
                return
            council = choose(self.rng, councils)
            work.pending_council = council
            self._transition(work, TurnPhase.AWAITING_COUNCIL_CHOICE)
            self._record(
                work, pending, EventType.COUNCIL_SCHEDULED,
                f"{council.emoji} Council: {council.question}",
                council_id=council.id,
            )
            return

        events = [e for e in self.catalog.events if e.is_eligible(work.bars, work.biome)]
        if not events:
            return
        event = choose(self.rng, events)
        work.pending_event = event
        self._transition(work, TurnPhase.AWAITING_EVENT_CHOICE)
        self._record(
            work, pending, EventType.EVENT_SCHEDULED,
            f"{event.emoji} {event.name}: {event.description}",
            event_id=event.id,
        )

    # ─── Commands: interactions ──────────────────────────────────

    def resolve_event(self, choice_index: int) -> CommandResult:
        command = "resolve_event"
        rejection = self._require_phase(command, TurnPhase.AWAITING_EVENT_CHOICE)
        if rejection:
            return rejection
        event = self._state.pending_event
        if event is None or not 0 <= choice_index < len(event.choices):
            return self._reject(command, INVALID_INDEX)

        work = self._state.model_copy(deep=True)
        pending = _Pending()
        choice = event.choices[choice_index]
        resolution = resolve_event_choice(
            choice,
            self.rng,
            self.config.risky_success_chance,
            self.config.risky_failure_scale,
        )
        self._apply_resolution(work, resolution)
        work.edu_metrics = profile.record_event_choice(work.edu_metrics, choice.type)
        work.pending_event = None

        outcome = "" if resolution.lucky else " (bad luck: half effect)"
        self._record(
            work, pending, EventType.EVENT_RESOLVED,
            f"{event.emoji} {resolution.message}{outcome}",
            event_id=event.id,
            choice_index=choice_index,
            choice_type=choice.type.value,
            lucky=resolution.lucky,
            effects=resolution.effects.model_dump(),
        )
        self._offer_rewards(work, pending)
        return self._commit(command, work, pending)

    def resolve_council(self, option_index: int) -> CommandResult:
        command = "resolve_council"
        rejection = self._require_phase(command, TurnPhase.AWAITING_COUNCIL_CHOICE)
        if rejection:
            return rejection
        council = self._state.pending_council
        if council is None or not 0 <= option_index < len(council.options):
            return self._reject(command, INVALID_INDEX)

        work = self._state.model_copy(deep=True)
        pending = _Pending()
        option = council.options[option_index]
        resolution = resolve_council_option(option)
        self._apply_resolution(work, resolution)
        work.edu_metrics = profile.record_council_stance(work.edu_metrics, option.stance)
        work.pending_council = None

        self._record(
            work, pending, EventType.COUNCIL_RESOLVED,
            f"{council.emoji} {resolution.message}",
            council_id=council.id,
            option_index=option_index,
            stance=option.stance.value,
            effects=resolution.effects.model_dump(),
        )
        self._offer_rewards(work, pending)
        return self._commit(command, work, pending)

    def _apply_resolution(self, work: GameState, resolution: Resolution) -> None:
        effects = resolution.effects
        work.bars = self._apply(work.bars, effects)
        work.coins = adjust_coins(work.coins, effects.coins)
        work.total_score += effects.positive_total
        work.visitors = compute_visitors(
            compute_equilibrium(work.bars), self.config.visitor_multiplier
        )

    def _offer_rewards(self, work: GameState, pending: _Pending) -> None:
        pool = pick_reward_pool(self.catalog, work.biome, work.level)
        offer = pick_random_cards(
            pool, self.config.reward_offer_size, self.rng, self.config.rarity_weights
        )
        if not offer:
            self._transition(work, TurnPhase.IDLE)
            return
        work.reward_offer = offer
        self._transition(work, TurnPhase.AWAITING_REWARD_PICK)
        self._record(
            work, pending, EventType.REWARD_OFFERED,
            "Choose a reward: " + ", ".join(card.name for card in offer),
            card_ids=[card.id for card in offer],
        )

    # ─── Commands: rewards ───────────────────────────────────────

    def pick_reward(self, index: int) -> CommandResult:
        """Add the offered card at `index` to the discard pile."""
        command = "pick_reward"
        rejection = self._require_phase(command, TurnPhase.AWAITING_REWARD_PICK)
        if rejection:
            return rejection
        offer = self._state.reward_offer or []
        if not 0 <= index < len(offer):
            return self._reject(command, INVALID_INDEX)

        work = self._state.model_copy(deep=True)
        pending = _Pending()
        card = offer[index]
        work.deck = deck_manager.add_to_deck(work.deck, card)
        work.reward_offer = None
        self._transition(work, TurnPhase.IDLE)

        self._record(
            work, pending, EventType.REWARD_PICKED,
            f"New card: {card.emoji} {card.name}",
            card_id=card.id,
        )
        return self._commit(command, work, pending)

    def skip_reward(self) -> CommandResult:
        command = "skip_reward"
        rejection = self._require_phase(command, TurnPhase.AWAITING_REWARD_PICK)
        if rejection:
            return rejection

        work = self._state.model_copy(deep=True)
        pending = _Pending()
        work.reward_offer = None
        self._transition(work, TurnPhase.IDLE)
        self._record(work, pending, EventType.REWARD_SKIPPED, "Reward skipped")
        return self._commit(command, work, pending)

    # ─── Commands: session ───────────────────────────────────────

    def set_biome(self, biome_id: str) -> CommandResult:
        """Switch the active biome (reward pool and eligible events)."""
        command = "set_biome"
        rejection = self._require_phase(command, TurnPhase.IDLE)
        if rejection:
            return rejection
        if not self.catalog.has_biome(biome_id):
            logger.warning(f"set_biome: unknown biome {biome_id!r}")
            return self._reject(command, UNKNOWN_BIOME)

        work = self._state.model_copy(deep=True)
        pending = _Pending()
        previous = work.biome
        work.biome = biome_id
        self._record(
            work, pending, EventType.BIOME_CHANGED,
            f"Biome: {self.catalog.biome(biome_id).name}",
            before=previous,
            after=biome_id,
        )
        return self._commit(command, work, pending)

    def reset(self, biome_id: str | None = None) -> CommandResult:
        """Start a fresh game. Allowed from every phase."""
        command = "reset"
        biome_id = biome_id or self._state.biome or self.config.default_biome
        if not self.catalog.has_biome(biome_id):
            logger.warning(f"reset: unknown biome {biome_id!r}")
            return self._reject(command, UNKNOWN_BIOME)

        work = self._new_state(biome_id)
        # state_version stays monotonic across resets
        work.state_version = self._state.state_version
        pending = _Pending()
        self._record(
            work, pending, EventType.GAME_RESET, f"New game in {biome_id}",
            biome=biome_id,
        )
        return self._commit(command, work, pending)

    # ─── Internals ───────────────────────────────────────────────

    def _new_state(self, biome_id: str) -> GameState:
        cfg = self.config
        biome = self.catalog.biome(biome_id)

        bars = Bars()
        for pillar, value in biome.start_bars.items():
            bars.set(pillar, value)

        cards = shuffle(self.rng, self.catalog.starting_deck(biome_id))
        deck = deck_manager.draw_initial_hand(cards, cfg.draw_count, cfg.max_hand)

        state = GameState(
            biome=biome_id,
            bars=bars,
            coins=biome.start_coins,
            deck=deck,
            max_plays_per_turn=cfg.max_plays_per_turn,
        )
        state.visitors = compute_visitors(compute_equilibrium(bars), cfg.visitor_multiplier)
        return state

    def _apply(self, bars: Bars, effect: Effect) -> Bars:
        return apply_effect(
            bars, effect, self.config.overdevelopment_gap, self.config.overdevelopment_penalty
        )

    def _grant_xp(self, work: GameState, amount: int, pending: _Pending) -> None:
        before = work.level
        economy = grant_experience(
            Economy(coins=work.coins, level=work.level, xp=work.xp),
            amount,
            self.config.level_thresholds,
        )
        work.xp = economy.xp
        work.level = economy.level
        if work.level > before:
            self._record(
                work, pending, EventType.LEVEL_UP, f"Level up! Now level {work.level}",
                before=before,
                after=work.level,
            )

    def _transition(self, work: GameState, to: TurnPhase) -> None:
        """Move the working state to a new phase, enforcing valid edges."""
        if to not in VALID_TRANSITIONS.get(work.phase, set()):
            raise InvalidPhaseError(work.phase, to)
        work.phase = to

    def _require_phase(self, command: str, expected: TurnPhase) -> CommandResult | None:
        phase = self._state.phase
        if phase.is_terminal:
            return self._reject(command, GAME_FINISHED)
        if phase != expected:
            return self._reject(command, WRONG_PHASE)
        return None

    def _reject(self, command: str, reason: str) -> CommandResult:
        logger.debug(f"Rejected {command}: {reason} (phase {self._state.phase.value})")
        return CommandResult.rejected(command, reason, self._state.state_version)

    def _record(
        self,
        work: GameState,
        pending: _Pending,
        event_type: EventType,
        summary: str,
        **payload,
    ) -> None:
        """Append to the state's event log and queue the matching bus event."""
        entry = TurnEvent(
            event_type=event_type.value,
            turn=work.turn,
            payload=payload,
            summary=summary,
        )
        work.event_log.append(entry)
        pending.events.append(entry)
        pending.emits.append((event_type, payload))

    def _commit(self, command: str, work: GameState, pending: _Pending) -> CommandResult:
        work.state_version += 1
        self._state = work

        for event_type, payload in pending.emits:
            self._bus.emit(
                event_type,
                session_id=self.session_id,
                turn=work.turn,
                **payload,
            )

        return CommandResult(
            command=command,
            accepted=True,
            state_version=work.state_version,
            events=pending.events,
        )
