"""Autoplay personas for simulation."""

PERSONAS = {
    "balanced": {
        "name": "Balanced",
        "style": "Plays whatever lifts the weakest pillar; keeps infrastructure in check.",
        "focus": None,                                   # Weighs pillars by how low they are
        "choice_order": ["smart", "quick", "risky"],
        "stance_order": ["sustainable", "neutral", "risky"],
        "takes_rewards": True,
    },
    "builder": {
        "name": "Builder",
        "style": "Builds first and asks questions later.",
        "focus": "infrastructure",
        "choice_order": ["quick", "risky", "smart"],
        "stance_order": ["risky", "neutral", "sustainable"],
        "takes_rewards": True,
    },
    "naturalist": {
        "name": "Naturalist",
        "style": "Protects nature above everything else.",
        "focus": "nature",
        "choice_order": ["smart", "risky", "quick"],
        "stance_order": ["sustainable", "neutral", "risky"],
        "takes_rewards": True,
    },
    "random": {
        "name": "Random",
        "style": "Picks any legal action at random. Useful for fuzzing the engine.",
        "focus": None,
        "choice_order": [],                              # Empty: choose at random
        "stance_order": [],
        "takes_rewards": True,
    },
}


def get_persona(name: str) -> dict:
    """Persona by name, falling back to balanced."""
    return PERSONAS.get(name, PERSONAS["balanced"])
