"""Shared fixtures and fakes for roastbot tests."""

from __future__ import annotations

import asyncio

import pytest

from roastbot.context import StaticContext
from roastbot.dedup import InFlightGuard
from roastbot.errors import DeliveryError, UpstreamError
from roastbot.models import PullRequestEvent, PullRequestStats, TriggerKind
from roastbot.pipeline import RoastPipeline


def make_event(
    trigger: TriggerKind = TriggerKind.OPENED,
    owner: str = "acme",
    repo: str = "widgets",
    number: int = 7,
    author: str = "alice",
    label: str | None = None,
    stats: PullRequestStats | None = None,
    installation_id: int | None = None,
) -> PullRequestEvent:
    """Factory helper for creating PullRequestEvent instances."""
    return PullRequestEvent(
        owner=owner,
        repo=repo,
        number=number,
        author=author,
        trigger=trigger,
        stats=stats or PullRequestStats(changed_files=3, additions=10, deletions=2),
        label=label,
        installation_id=installation_id,
    )


def make_payload(
    action: str = "opened",
    number: int = 7,
    author: str = "alice",
    label: str | None = None,
    installation_id: int | None = 99,
) -> dict:
    """Factory helper for a minimal pull_request webhook payload."""
    payload: dict = {
        "action": action,
        "pull_request": {
            "number": number,
            "user": {"login": author},
            "changed_files": 3,
            "additions": 10,
            "deletions": 2,
        },
        "repository": {"name": "widgets", "owner": {"login": "acme"}},
    }
    if label is not None:
        payload["label"] = {"name": label}
    if installation_id is not None:
        payload["installation"] = {"id": installation_id}
    return payload


class FakeGitHub:
    def __init__(
        self,
        diff: str = "+foo\n-bar",
        diff_error: Exception | None = None,
        post_error: Exception | None = None,
        gate: asyncio.Event | None = None,
    ):
        self.diff = diff
        self.diff_error = diff_error
        self.post_error = post_error
        self.gate = gate
        self.diff_calls: list[tuple] = []
        self.post_calls: list[tuple] = []

    async def get_pr_diff(self, owner, repo, pr_number, installation_id=None):
        self.diff_calls.append((owner, repo, pr_number))
        if self.gate is not None:
            await self.gate.wait()
        if self.diff_error:
            raise self.diff_error
        return self.diff

    async def post_issue_comment(self, owner, repo, issue_number, body, installation_id=None):
        self.post_calls.append((owner, repo, issue_number, body))
        if self.post_error:
            raise self.post_error
        return {"id": len(self.post_calls)}

    @property
    def bodies(self) -> list[str]:
        return [call[3] for call in self.post_calls]


class FakeRoaster:
    def __init__(
        self,
        roast: object = "X is bad",
        roast_error: Exception | None = None,
        term: str = "oh no",
        term_error: Exception | None = None,
    ):
        self.roast = roast
        self.roast_error = roast_error
        self.term = term
        self.term_error = term_error
        self.roast_calls: list[dict] = []
        self.term_calls: list[str] = []

    async def generate_roast(self, stats, diff, author_context=None, style_guide=None):
        self.roast_calls.append(
            {"stats": stats, "diff": diff, "author_context": author_context, "style_guide": style_guide}
        )
        if self.roast_error:
            raise self.roast_error
        return self.roast

    async def generate_gif_search_term(self, roast):
        self.term_calls.append(roast)
        if self.term_error:
            raise self.term_error
        return self.term


class FakeGiphy:
    def __init__(self, url: str | None = "https://g/1.gif", error: Exception | None = None):
        self.url = url
        self.error = error
        self.calls: list[str] = []

    async def search_gif(self, term):
        self.calls.append(term)
        if self.error:
            raise self.error
        return self.url


def make_pipeline(
    github: FakeGitHub | None = None,
    roaster: FakeRoaster | None = None,
    giphy: FakeGiphy | None = None,
    context: StaticContext | None = None,
) -> RoastPipeline:
    return RoastPipeline(
        github=github or FakeGitHub(),
        roaster=roaster or FakeRoaster(),
        context=context,
        giphy=giphy or FakeGiphy(),
        guard=InFlightGuard(),
        trigger_label="truss-review",
    )


@pytest.fixture
def upstream_error() -> UpstreamError:
    return UpstreamError("provider exploded", stage="roast")


@pytest.fixture
def delivery_error() -> DeliveryError:
    return DeliveryError("github said no", stage="post")
