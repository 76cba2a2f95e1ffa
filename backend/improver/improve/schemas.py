from typing import Any, Literal, Optional

from pydantic import BaseModel, StrictStr, field_validator

MIN_IDEA_LENGTH = 10
IDEA_TOO_SHORT = "Please write a bit more detail (at least 10 characters)."


def clean_idea(raw: str) -> str:
    """Trim and collapse every whitespace run to a single space."""
    return " ".join(raw.split())


class ImproveRequest(BaseModel):
    idea: StrictStr
    mode: Literal["standard", "ai"] = "standard"

    @field_validator("idea")
    @classmethod
    def idea_long_enough(cls, v: str) -> str:
        idea = clean_idea(v)
        # Length in UTF-16 units, as browsers count it
        if len(idea.encode("utf-16-le")) // 2 < MIN_IDEA_LENGTH:
            raise ValueError(IDEA_TOO_SHORT)
        return idea

    @field_validator("mode", mode="before")
    @classmethod
    def unknown_mode_is_standard(cls, v: Any) -> str:
        return "ai" if v == "ai" else "standard"


class Summary(BaseModel):
    audience: str
    pages: list[str]
    style: str
    features: list[str]
    lang: Literal["ar", "en"]
    industry: str


class StandardResult(BaseModel):
    improved: str
    summary: Summary


class AIUsage(BaseModel):
    remaining: int
    resetAt: int


class ImproveResponse(BaseModel):
    improved: str
    summary: Summary
    modeUsed: Literal["standard", "ai"]
    warningCode: Optional[str] = None
    warning: Optional[str] = None
    ai: Optional[AIUsage] = None
