"""
Prompt Improver Router

Modes:
  standard:  rule-based template, always available
  ai:        OpenAI rewrite, AI_DAILY_LIMIT/day per client key (default 10, in-memory, per process)

AI mode never fails the request: quota exhaustion or any provider error falls
back to the standard template with a warningCode + warning.
A quota slot is consumed only after a successful AI rewrite.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from improver.middleware import limiter
from improver.improve.ai_service import AIRewriter, get_ai_rewriter
from improver.improve.fallback import FAILED, FallbackWarning, limit_reached, warning_for
from improver.improve.quota import (
    QuotaConflict, QuotaExhausted, QuotaStatus, QuotaTracker, get_quota_tracker,
)
from improver.improve.schemas import (
    IDEA_TOO_SHORT, AIUsage, ImproveRequest, ImproveResponse, StandardResult,
)
from improver.improve.templater import detect_language, improve_standard

logger = logging.getLogger(__name__)
router = APIRouter()

IMPROVE_RATE_LIMIT = "30/minute"


def _get_client_key(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.headers.get("x-real-ip") or "unknown"


def _usage(status: QuotaStatus) -> AIUsage:
    return AIUsage(remaining=status.remaining, resetAt=status.reset_at)


def _fallback(
    standard: StandardResult, warning: FallbackWarning, usage: AIUsage
) -> dict:
    return ImproveResponse(
        improved=standard.improved,
        summary=standard.summary,
        modeUsed="standard",
        warningCode=warning.code,
        warning=warning.message,
        ai=usage,
    ).model_dump()


def _bad_request() -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": IDEA_TOO_SHORT})


# ═══════════════════════════════════════
# GET /api/limits — remaining AI rewrites for the caller
# ═══════════════════════════════════════

@router.get("/limits")
async def get_limits(
    request: Request,
    tracker: QuotaTracker = Depends(get_quota_tracker),
):
    status = tracker.check_eligible(_get_client_key(request))
    return {"remaining": status.remaining, "limit": tracker.limit, "resetAt": status.reset_at}


# ═══════════════════════════════════════
# POST /api/improve
# ═══════════════════════════════════════

@router.post("/improve")
@limiter.limit(IMPROVE_RATE_LIMIT)
async def improve(
    request: Request,
    tracker: QuotaTracker = Depends(get_quota_tracker),
    rewriter: AIRewriter = Depends(get_ai_rewriter),
):
    try:
        req = ImproveRequest.model_validate(await request.json())
    except (ValueError, ValidationError):
        return _bad_request()

    # Standard result doubles as the summary and the fallback
    standard = improve_standard(req.idea)

    if req.mode == "standard":
        return ImproveResponse(
            improved=standard.improved, summary=standard.summary, modeUsed="standard",
        ).model_dump(exclude_none=True)

    key = _get_client_key(request)
    async with tracker.lock(key):
        status = tracker.check_eligible(key)
        if not status.allowed:
            logger.info(f"AI limit reached for {key}")
            return _fallback(standard, limit_reached(tracker.limit), _usage(status))

        ai = await rewriter.rewrite(req.idea, detect_language(req.idea))
        if not ai.ok:
            return _fallback(standard, warning_for(ai), _usage(status))

        try:
            consumed = tracker.consume(key)
        except QuotaExhausted as e:
            # Another instance sharing the store used the last slot
            logger.info(f"AI limit reached for {key} during consume")
            return _fallback(
                standard, limit_reached(tracker.limit), AIUsage(remaining=0, resetAt=e.reset_at)
            )
        except QuotaConflict:
            logger.warning(f"Could not record AI use for {key}, falling back")
            return _fallback(standard, FAILED, _usage(status))

    return ImproveResponse(
        improved=ai.text, summary=standard.summary, modeUsed="ai", ai=_usage(consumed),
    ).model_dump(exclude_none=True)
