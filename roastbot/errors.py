"""Error taxonomy for the roast pipeline."""

from __future__ import annotations


class RoastBotError(Exception):
    """Base error. ``stage`` names the pipeline step that failed."""

    def __init__(self, message: str, stage: str = ""):
        self.message = message
        self.stage = stage
        super().__init__(message)


class UpstreamError(RoastBotError):
    """A completion-provider or GitHub API call failed or timed out."""


class EnrichmentError(RoastBotError):
    """Giphy lookup failed. Always recovered locally as "no image"."""


class DeliveryError(RoastBotError):
    """Posting the comment itself failed. Nothing left to fall back to."""
