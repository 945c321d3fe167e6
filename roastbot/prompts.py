"""Prompt assembly and comment rendering. Everything here is pure."""

from __future__ import annotations

import re

from roastbot.models import PullRequestStats

SYSTEM_PROMPT = """You are a brutally honest code reviewer who roasts code in a funny way.
Be sarcastic, witty, and savage but keep it lighthearted and fun.
Point out actual code issues but make it entertaining.
Keep your response under 100 words."""

SEARCH_TERM_SYSTEM_PROMPT = """You pick GIF search terms.
Given a code roast, reply with a 1-3 word phrase that captures its tone as a reaction GIF.
Reply with the phrase only: no quotes, no punctuation, no explanation."""

TRUNCATION_MARKER = "\n... [diff truncated]"

_GREETING = "👋 Thanks for opening this PR, @{username}! "
_FALLBACK_MESSAGE = "❌ Failed to roast your code. Even the AI couldn't handle this mess. 💀"


def truncate_diff(diff: str, max_chars: int) -> tuple[str, bool]:
    """Cap the diff at ``max_chars``. Returns (diff, was_truncated)."""
    if max_chars <= 0 or len(diff) <= max_chars:
        return diff, False
    return diff[:max_chars] + TRUNCATION_MARKER, True


def build_user_prompt(
    stats: PullRequestStats,
    diff: str,
    author_context: str | None = None,
    style_guide: str | None = None,
    truncated: bool = False,
) -> str:
    """Stats, optional author block, optional style guide, then the fenced diff."""
    sections = [
        "Review this PR and roast it:",
        "**Stats:**\n"
        f"- {stats.changed_files} files changed\n"
        f"- {stats.additions} additions\n"
        f"- {stats.deletions} deletions"
        + ("\n- Diff truncated, only the beginning is shown" if truncated else ""),
    ]
    if author_context:
        sections.append(f"**About the author (use this for personalized roasting):**\n{author_context}")
    if style_guide:
        sections.append(f"**Style guide the code should follow:**\n{style_guide.strip()}")
    sections.append(f"**Diff:**\n```diff\n{diff}\n```")
    return "\n\n".join(sections)


def build_search_term_prompt(roast: str) -> str:
    return f"Roast:\n{roast}\n\nGIF search phrase:"


def clean_search_term(raw: str) -> str:
    """Strip quotes, trailing punctuation and extra whitespace from a model reply."""
    term = raw.strip().splitlines()[0] if raw.strip() else ""
    term = term.strip().strip("\"'`").strip()
    term = term.rstrip(".!?,;:").strip()
    return re.sub(r"\s+", " ", term)


def hashtag(term: str) -> str:
    """'Oh no!' -> 'ohno'"""
    return "".join(ch for ch in term.lower() if ch.isalnum())


def render_success_comment(
    username: str,
    roast: str,
    gif_url: str | None = None,
    search_term: str | None = None,
) -> str:
    body = f"{_GREETING.format(username=username)}\n\n{roast.strip()}\n"
    if gif_url:
        tag = hashtag(search_term or "")
        if tag:
            body += f"\n#{tag}\n![{tag}]({gif_url})\n"
        else:
            body += f"\n![gif]({gif_url})\n"
    return body


def render_fallback_comment(username: str) -> str:
    return f"{_GREETING.format(username=username)}\n\n{_FALLBACK_MESSAGE}"
