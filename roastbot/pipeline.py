"""Roast pipeline: one run per accepted pull_request event.

    diff → author/style context → roast → [search term → GIF] → render → post

Each external step returns Ok or Failed instead of raising. Any failure
before rendering collapses into the fallback comment; a failed post is
logged and nothing else is attempted. ``handle`` never raises.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar, Union

from roastbot.config import Settings
from roastbot.context import StaticContext
from roastbot.dedup import InFlightGuard
from roastbot.giphy import GiphyClient
from roastbot.github_api import GitHubClient
from roastbot.llm import RoastClient
from roastbot.models import PullRequestEvent, TriggerKind
from roastbot.prompts import render_fallback_comment, render_success_comment

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failed:
    stage: str
    error: Exception


StageResult = Union[Ok[Any], Failed]


class PipelineOutcome(str, Enum):
    IGNORED = "ignored"  # not a trigger we act on
    DUPLICATE = "duplicate"  # same PR already in flight
    ROASTED = "roasted"
    FALLBACK = "fallback"
    DELIVERY_FAILED = "delivery_failed"


async def run_stage(stage: str, awaitable: Awaitable[T]) -> StageResult:
    try:
        return Ok(await awaitable)
    except Exception as e:
        return Failed(stage, e)


class RoastPipeline:
    def __init__(
        self,
        github: GitHubClient,
        roaster: RoastClient,
        context: StaticContext | None = None,
        giphy: GiphyClient | None = None,
        guard: InFlightGuard | None = None,
        trigger_label: str = "truss-review",
        roast_on_open: bool = True,
        roast_on_synchronize: bool = True,
    ):
        self.github = github
        self.roaster = roaster
        self.context = context or StaticContext()
        self.giphy = giphy
        self.guard = guard or InFlightGuard()
        self.trigger_label = trigger_label
        self.roast_on_open = roast_on_open
        self.roast_on_synchronize = roast_on_synchronize

    def is_eligible(self, event: PullRequestEvent) -> bool:
        if event.trigger is TriggerKind.LABELED:
            return event.label == self.trigger_label
        if event.trigger is TriggerKind.OPENED:
            return self.roast_on_open
        return self.roast_on_synchronize

    def wants_gif(self, event: PullRequestEvent) -> bool:
        """The label-triggered review is the extended one, with a GIF."""
        return self.giphy is not None and event.trigger is TriggerKind.LABELED

    async def handle(self, event: PullRequestEvent) -> PipelineOutcome:
        """Process one event and post exactly one comment for it."""
        key = event.dedup_key
        log_extra = {"dedup_key": str(key)}

        if not self.is_eligible(event):
            logger.debug("Ignoring %s on %s (label=%r)", event.trigger.value, key, event.label, extra=log_extra)
            return PipelineOutcome.IGNORED

        if not self.guard.try_acquire(key):
            logger.info("ROAST_DUPLICATE key=%s trigger=%s", key, event.trigger.value, extra=log_extra)
            return PipelineOutcome.DUPLICATE

        try:
            outcome = await self._run(event)
        except Exception:
            logger.exception("ROAST_CRASHED key=%s", key, extra=log_extra)
            outcome = PipelineOutcome.DELIVERY_FAILED
        finally:
            self.guard.release(key)

        logger.info(
            "ROAST_DONE key=%s outcome=%s",
            key,
            outcome.value,
            extra={**log_extra, "outcome": outcome.value},
        )
        return outcome

    async def _run(self, event: PullRequestEvent) -> PipelineOutcome:
        key = event.dedup_key
        try:
            composed = await self.compose(event)
        except Exception as e:
            composed = Failed("render", e)

        if isinstance(composed, Ok):
            body, outcome = composed.value, PipelineOutcome.ROASTED
        else:
            logger.warning(
                "ROAST_FALLBACK key=%s stage=%s error=%s",
                key,
                composed.stage,
                composed.error,
                extra={"dedup_key": str(key), "stage": composed.stage},
            )
            body, outcome = render_fallback_comment(event.author), PipelineOutcome.FALLBACK

        delivered = await run_stage(
            "post",
            self.github.post_issue_comment(
                event.owner, event.repo, event.number, body, installation_id=event.installation_id
            ),
        )
        if isinstance(delivered, Failed):
            logger.error(
                "ROAST_DELIVERY_FAILED key=%s error=%s",
                key,
                delivered.error,
                extra={"dedup_key": str(key), "stage": "post"},
            )
            return PipelineOutcome.DELIVERY_FAILED
        return outcome

    async def compose(self, event: PullRequestEvent) -> StageResult:
        """Steps up to rendering. Returns Ok(comment body) or the first failure."""
        diff = await run_stage(
            "diff",
            self.github.get_pr_diff(event.owner, event.repo, event.number, installation_id=event.installation_id),
        )
        if isinstance(diff, Failed):
            return diff

        roast = await run_stage(
            "roast",
            self.roaster.generate_roast(
                event.stats,
                diff.value,
                author_context=self.context.author_context(event.author),
                style_guide=self.context.style_guide,
            ),
        )
        if isinstance(roast, Failed):
            return roast

        search_term, gif_url = None, None
        if self.wants_gif(event):
            search_term, gif_url = await self._enrich(event, roast.value)

        return Ok(render_success_comment(event.author, roast.value, gif_url=gif_url, search_term=search_term))

    async def _enrich(self, event: PullRequestEvent, roast: str) -> tuple[str | None, str | None]:
        """Search term + GIF. Failures here only drop the image."""
        term = await run_stage("search_term", self.roaster.generate_gif_search_term(roast))
        if isinstance(term, Failed):
            logger.warning("No GIF for %s: search term failed: %s", event.dedup_key, term.error)
            return None, None

        gif = await run_stage("gif", self.giphy.search_gif(term.value))
        if isinstance(gif, Failed):
            logger.warning("No GIF for %s: lookup failed: %s", event.dedup_key, gif.error)
            return term.value, None
        return term.value, gif.value


def build_pipeline(settings: Settings) -> RoastPipeline:
    """Wire the pipeline and its clients from Settings."""
    return RoastPipeline(
        github=GitHubClient(
            app_id=settings.github_app_id,
            private_key=settings.github_private_key,
            token=settings.github_token,
            timeout=settings.http_timeout_seconds,
        ),
        roaster=RoastClient(
            api_key=settings.llm_api_key,
            model=settings.llm_model,
            roast_temperature=settings.roast_temperature,
            roast_max_tokens=settings.roast_max_tokens,
            search_term_temperature=settings.search_term_temperature,
            search_term_max_tokens=settings.search_term_max_tokens,
            timeout=settings.llm_timeout_seconds,
            max_diff_chars=settings.max_diff_chars,
        ),
        context=StaticContext.load(settings.author_profiles_path, settings.style_guide_path),
        giphy=GiphyClient(
            api_key=settings.giphy_api_key,
            rating=settings.giphy_rating,
            timeout=settings.http_timeout_seconds,
        ),
        trigger_label=settings.trigger_label,
        roast_on_open=settings.roast_on_open,
        roast_on_synchronize=settings.roast_on_synchronize,
    )
