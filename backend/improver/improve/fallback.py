"""Friendly warnings shown when AI mode falls back to the standard template."""

from dataclasses import dataclass
from typing import Callable

from improver.improve.ai_service import AI_NOT_CONFIGURED, AIErrorDetails, AIResult


@dataclass(frozen=True)
class FallbackWarning:
    code: str
    message: str


def limit_reached(limit: int) -> FallbackWarning:
    return FallbackWarning(
        "AI_LIMIT_REACHED", f"AI limit reached ({limit}/day). Using Standard instead."
    )


NOT_CONFIGURED = FallbackWarning(
    "AI_NOT_CONFIGURED", "AI isn’t enabled on this deployment. Using Standard instead."
)
NO_CREDITS = FallbackWarning("AI_NO_CREDITS", "AI rewrite needs API credits. Using Standard instead.")
RATE_LIMITED = FallbackWarning("AI_RATE_LIMIT", "AI is busy right now. Using Standard instead.")
BAD_KEY = FallbackWarning("AI_BAD_KEY", "AI key looks invalid. Using Standard instead.")
FAILED = FallbackWarning("AI_FAILED", "AI failed temporarily. Using Standard instead.")


def _out_of_credits(d: AIErrorDetails) -> bool:
    return d.status == 429 and "insufficient_quota" in (d.code, d.type)


# First match wins; anything unrecognised is FAILED
PROVIDER_RULES: tuple[tuple[Callable[[AIErrorDetails], bool], FallbackWarning], ...] = (
    (_out_of_credits, NO_CREDITS),
    (lambda d: d.status == 429, RATE_LIMITED),
    (lambda d: d.status == 401, BAD_KEY),
)


def warning_for(result: AIResult) -> FallbackWarning:
    if result.reason == AI_NOT_CONFIGURED:
        return NOT_CONFIGURED
    details = result.details or AIErrorDetails()
    for matches, warning in PROVIDER_RULES:
        if matches(details):
            return warning
    return FAILED
