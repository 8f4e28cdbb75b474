"""
Pydantic schemas for the Tesouro HTTP API.

Requests carry only player input; the engine validates everything
else and answers with a CommandResponse whose `ok` mirrors acceptance.
"""

from pydantic import BaseModel, Field


class CreateSessionRequest(BaseModel):
    """POST /sessions"""
    biome: str | None = None
    seed: int | None = None


class IndexRequest(BaseModel):
    """Hand, choice, option or reward position."""
    index: int


class BiomeRequest(BaseModel):
    biome: str


class ResetRequest(BaseModel):
    biome: str | None = None


class SessionResponse(BaseModel):
    ok: bool = True
    session_id: str
    state: dict


class CommandResponse(BaseModel):
    """
    Outcome of one engine command.

    A rejected command still answers 200 with ok=False and a reason
    code; only unknown sessions are HTTP errors.
    """
    ok: bool
    session_id: str
    command: str
    reason: str | None = None
    state_version: int
    phase: str
    log: list[str] = Field(default_factory=list)
    state: dict


class ProfileResponse(BaseModel):
    ok: bool = True
    session_id: str
    dominant_profile: str
    alerts: list[str] = Field(default_factory=list)
    report: dict


class ErrorResponse(BaseModel):
    """Standard error response."""
    ok: bool = False
    error: str
