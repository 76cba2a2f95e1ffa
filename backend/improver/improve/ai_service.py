"""
AI rewrite via the OpenAI Responses API.

Single attempt, no retries: any failure comes back as an AIResult with
ok=False so the caller can fall back to the standard template. Provider error
details are logged here and never returned to the client.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from fastapi import Depends
from openai import AsyncOpenAI, APIConnectionError, APIError, APIStatusError

from improver.config import Settings, get_settings

logger = logging.getLogger(__name__)

AI_NOT_CONFIGURED = "AI_NOT_CONFIGURED"
AI_ERROR = "AI_ERROR"


@dataclass(frozen=True)
class AIErrorDetails:
    status: Optional[int] = None
    code: Optional[str] = None
    type: Optional[str] = None


@dataclass(frozen=True)
class AIResult:
    ok: bool
    text: str = ""
    reason: Optional[str] = None
    details: Optional[AIErrorDetails] = None


def build_prompt(idea: str, lang: str) -> str:
    return "\n".join([
        "You are a senior product designer + conversion-focused web copywriter.",
        "Turn the user idea into a BETTER, CLEARER, build-ready website prompt.",
        "Return ONLY the final prompt. No explanations.",
        f"Write in the same language as the input ({'Arabic' if lang == 'ar' else 'English'}).",
        "",
        "Use EXACT headings:",
        "Build-ready website prompt:",
        "1) Website type",
        "2) Target audience",
        "3) Primary goal",
        "4) Tone & style",
        "5) Hero section copy (headline<=10 words, subheadline 1–2 sentences, CTA 2–4 words)",
        "6) Suggested pages",
        "7) Home page sections (ordered 6–9)",
        "8) Key features (5–8 bullets)",
        "9) Content requirements",
        "10) Constraints (mobile-first, fast, accessible, SEO basics)",
        "",
        f'User idea: "{idea}"',
    ])


class AIRewriter:
    def __init__(self, settings: Settings):
        self.settings = settings

    @property
    def configured(self) -> bool:
        return bool(self.settings.openai_api_key)

    async def rewrite(self, idea: str, lang: str) -> AIResult:
        if not self.configured:
            return AIResult(ok=False, reason=AI_NOT_CONFIGURED)

        client = AsyncOpenAI(
            api_key=self.settings.openai_api_key,
            timeout=httpx.Timeout(self.settings.openai_timeout, connect=10.0),
            max_retries=0,
        )

        try:
            response = await client.responses.create(
                model=self.settings.openai_model,
                input=build_prompt(idea, lang),
                temperature=0.7,
            )
        except APIStatusError as e:
            details = AIErrorDetails(status=e.status_code, code=e.code, type=e.type)
            logger.warning(
                f"OpenAI error: status={details.status} code={details.code} type={details.type}"
            )
            return AIResult(ok=False, reason=AI_ERROR, details=details)
        except APIConnectionError as e:
            logger.warning(f"OpenAI unreachable: {e}")
            return AIResult(ok=False, reason=AI_ERROR)
        except APIError as e:
            logger.warning(f"OpenAI API error: {e}")
            return AIResult(ok=False, reason=AI_ERROR)

        text = (response.output_text or "").strip()
        if not text:
            logger.warning("OpenAI returned an empty rewrite")
            return AIResult(ok=False, reason=AI_ERROR)
        return AIResult(ok=True, text=text)


def get_ai_rewriter(settings: Settings = Depends(get_settings)) -> AIRewriter:
    return AIRewriter(settings)
