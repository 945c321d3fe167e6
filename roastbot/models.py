"""Ephemeral data carried through one pipeline run."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class TriggerKind(str, Enum):
    OPENED = "opened"
    LABELED = "labeled"
    SYNCHRONIZE = "synchronize"


@dataclass(frozen=True)
class PullRequestStats:
    """Change counts read straight off the pull_request payload."""

    changed_files: int
    additions: int
    deletions: int

    @classmethod
    def from_payload(cls, pr: dict[str, Any]) -> PullRequestStats:
        return cls(
            changed_files=int(pr.get("changed_files") or 0),
            additions=int(pr.get("additions") or 0),
            deletions=int(pr.get("deletions") or 0),
        )


@dataclass(frozen=True)
class DedupKey:
    owner: str
    repo: str
    number: int

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}#{self.number}"


@dataclass(frozen=True)
class PullRequestEvent:
    """One inbound pull_request delivery, reduced to what the pipeline needs."""

    owner: str
    repo: str
    number: int
    author: str
    trigger: TriggerKind
    stats: PullRequestStats
    label: str | None = None
    installation_id: int | None = None

    @property
    def dedup_key(self) -> DedupKey:
        return DedupKey(self.owner, self.repo, self.number)

    @classmethod
    def from_payload(cls, action: str, payload: dict[str, Any]) -> PullRequestEvent | None:
        """Build an event from a ``pull_request`` webhook payload.

        Returns None for actions the bot does not handle. Raises KeyError
        when a handled action is missing required fields.
        """
        try:
            trigger = TriggerKind(action)
        except ValueError:
            return None

        pr = payload["pull_request"]
        repo = payload["repository"]
        label = (payload.get("label") or {}).get("name") if trigger is TriggerKind.LABELED else None
        installation = payload.get("installation") or {}

        return cls(
            owner=repo["owner"]["login"],
            repo=repo["name"],
            number=int(pr["number"]),
            author=pr["user"]["login"],
            trigger=trigger,
            stats=PullRequestStats.from_payload(pr),
            label=label,
            installation_id=installation.get("id"),
        )
