"""
CommandResult schema: the return value of every engine command.

Rejected commands are not errors: the UI simply ignores an unavailable
action. `accepted` is False, `reason` names why, and the state is
exactly what it was before the call.
"""

from pydantic import BaseModel, Field

from .event import TurnEvent


class CommandResult(BaseModel):
    """Outcome of a single engine command."""
    command: str                    # "play_card", "end_turn", ...
    accepted: bool
    reason: str | None = None       # Rejection code, None when accepted
    state_version: int = 0          # Version after the command

    # Events appended to the log by this command
    events: list[TurnEvent] = Field(default_factory=list)

    @classmethod
    def rejected(cls, command: str, reason: str, state_version: int) -> "CommandResult":
        return cls(
            command=command,
            accepted=False,
            reason=reason,
            state_version=state_version,
        )

    @property
    def summary(self) -> list[str]:
        """Human-readable lines for quick display."""
        return [e.summary for e in self.events if e.summary]
