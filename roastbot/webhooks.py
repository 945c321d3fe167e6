"""Webhook event parsing and dispatch."""

from __future__ import annotations

import logging

from roastbot.models import PullRequestEvent
from roastbot.pipeline import PipelineOutcome, RoastPipeline

logger = logging.getLogger(__name__)

HANDLED_EVENTS = {
    "pull_request.opened",
    "pull_request.labeled",
    "pull_request.synchronize",
}


def parse_event(event_name: str | None, payload: dict) -> PullRequestEvent | None:
    """Turn a delivery into a PullRequestEvent, or None if we don't handle it."""
    action = payload.get("action", "")
    if f"{event_name}.{action}" not in HANDLED_EVENTS:
        return None
    try:
        return PullRequestEvent.from_payload(action, payload)
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("Malformed %s.%s payload: %r", event_name, action, e)
        return None


async def handle_pull_request(pipeline: RoastPipeline, event: PullRequestEvent) -> PipelineOutcome:
    """Handle pull_request.opened / labeled / synchronize."""
    logger.info(
        "PR %s %s by %s (label=%r)",
        event.dedup_key,
        event.trigger.value,
        event.author,
        event.label,
    )
    return await pipeline.handle(event)
