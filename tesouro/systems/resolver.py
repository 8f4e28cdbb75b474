"""
Event and council resolution.

Turns a chosen option into the effect vector the engine applies. Event
choices of the risky type flip a coin; on failure every component,
coins included, is halved and rounded independently. Council options
are always applied as written.
"""

from dataclasses import dataclass

from ..state.schema import ChoiceType, CouncilOption, CouncilStance, Effect, EventChoice
from ..tools.rng import RandomSource, flip


@dataclass
class Resolution:
    """Effect to apply plus what the roll did."""
    effects: Effect
    lucky: bool = True                        # False only for a failed risky roll
    choice_type: ChoiceType | None = None     # Events
    stance: CouncilStance | None = None       # Councils
    message: str = ""

    @property
    def was_scaled(self) -> bool:
        return not self.lucky


def resolve_event_choice(
    choice: EventChoice,
    rng: RandomSource,
    success_chance: float = 0.5,
    failure_scale: float = 0.5,
) -> Resolution:
    """Resolve an event choice, rolling only for risky ones."""
    if choice.type != ChoiceType.RISKY:
        return Resolution(
            effects=choice.effects,
            choice_type=choice.type,
            message=choice.message,
        )

    if flip(rng, success_chance):
        return Resolution(
            effects=choice.effects,
            lucky=True,
            choice_type=choice.type,
            message=choice.message,
        )

    return Resolution(
        effects=choice.effects.scaled(failure_scale),
        lucky=False,
        choice_type=choice.type,
        message=choice.message,
    )


def resolve_council_option(option: CouncilOption) -> Resolution:
    return Resolution(
        effects=option.effects,
        stance=option.stance,
        message=option.feedback,
    )
