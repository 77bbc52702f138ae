"""Request and response models for the spam endpoint."""
from typing import Optional

from pydantic import BaseModel


class SpamRequest(BaseModel):
    """Body accepted by ``POST /api/spam``.

    ``null`` is accepted so it is reported like a missing text.
    """

    text: Optional[str] = None


class SpamResponse(BaseModel):
    """Verdict returned for a classified text.

    Field names follow the public JSON contract, hence the camel case.
    """

    spamProbability: float
    isSpam: bool


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str = "ok"
    model: str
