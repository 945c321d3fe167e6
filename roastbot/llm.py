"""Completion client: roast generation and GIF search-term extraction."""

from __future__ import annotations

import asyncio
import logging

import litellm

from roastbot.errors import UpstreamError
from roastbot.models import PullRequestStats
from roastbot.prompts import (
    SEARCH_TERM_SYSTEM_PROMPT,
    SYSTEM_PROMPT,
    build_search_term_prompt,
    build_user_prompt,
    clean_search_term,
    truncate_diff,
)

logger = logging.getLogger(__name__)

# Suppress litellm's verbose logging
litellm.suppress_debug_info = True


async def llm_completion(
    prompt: str,
    system: str = "",
    model: str = "gpt-4o-mini",
    api_key: str | None = None,
    temperature: float | None = None,
    max_tokens: int | None = None,
    timeout: float | None = None,
) -> str:
    """Single-shot LLM completion. Returns the assistant message content."""
    messages: list[dict] = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})

    kwargs: dict = {"model": model, "messages": messages}
    if api_key:
        kwargs["api_key"] = api_key
    if temperature is not None:
        kwargs["temperature"] = temperature
    if max_tokens is not None:
        kwargs["max_tokens"] = max_tokens
    if timeout is not None:
        kwargs["timeout"] = timeout

    response = await asyncio.wait_for(litellm.acompletion(**kwargs), timeout)
    return response.choices[0].message.content


class RoastClient:
    """Wraps the two completion calls the pipeline makes.

    Every failure (provider error, timeout, empty reply) surfaces as
    UpstreamError tagged with the stage name.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        roast_temperature: float = 0.9,
        roast_max_tokens: int = 300,
        search_term_temperature: float = 0.7,
        search_term_max_tokens: int = 20,
        timeout: float = 60.0,
        max_diff_chars: int = 20000,
    ):
        self.api_key = api_key
        self.model = model
        self.roast_temperature = roast_temperature
        self.roast_max_tokens = roast_max_tokens
        self.search_term_temperature = search_term_temperature
        self.search_term_max_tokens = search_term_max_tokens
        self.timeout = timeout
        self.max_diff_chars = max_diff_chars

    async def generate_roast(
        self,
        stats: PullRequestStats,
        diff: str,
        author_context: str | None = None,
        style_guide: str | None = None,
    ) -> str:
        diff, truncated = truncate_diff(diff, self.max_diff_chars)
        if truncated:
            logger.info("Diff truncated to %d chars for roast prompt", self.max_diff_chars)
        prompt = build_user_prompt(stats, diff, author_context, style_guide, truncated=truncated)
        return await self._complete(
            "roast",
            SYSTEM_PROMPT,
            prompt,
            temperature=self.roast_temperature,
            max_tokens=self.roast_max_tokens,
        )

    async def generate_gif_search_term(self, roast: str) -> str:
        raw = await self._complete(
            "search_term",
            SEARCH_TERM_SYSTEM_PROMPT,
            build_search_term_prompt(roast),
            temperature=self.search_term_temperature,
            max_tokens=self.search_term_max_tokens,
        )
        term = clean_search_term(raw)
        if not term:
            raise UpstreamError("Completion returned no usable search term", stage="search_term")
        return term

    async def _complete(
        self, stage: str, system: str, prompt: str, temperature: float, max_tokens: int
    ) -> str:
        try:
            text = await llm_completion(
                prompt,
                system=system,
                model=self.model,
                api_key=self.api_key,
                temperature=temperature,
                max_tokens=max_tokens,
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise UpstreamError(f"Completion timed out after {self.timeout}s", stage=stage) from e
        except Exception as e:
            raise UpstreamError(f"Completion failed: {e}", stage=stage) from e

        if not text or not text.strip():
            raise UpstreamError("Completion returned no text", stage=stage)
        return text.strip()
