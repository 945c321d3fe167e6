"""GitHub API client for fetching PR diffs and posting comments.

Handles GitHub App authentication (JWT + installation tokens) and falls
back to a plain token when no App credentials are configured.
"""

from __future__ import annotations

import logging
import time

import httpx
import jwt

from roastbot.errors import DeliveryError, UpstreamError

logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"


def _load_private_key(key: str) -> str:
    """Accept PEM contents or a path to a .pem file."""
    if key.startswith("-----BEGIN"):
        return key
    with open(key) as f:
        return f.read()


def _auth_headers(token: str) -> dict[str, str]:
    return {
        "Authorization": f"token {token}",
        "Accept": "application/vnd.github+json",
    }


class GitHubClient:
    def __init__(
        self,
        app_id: str = "",
        private_key: str = "",
        token: str = "",
        timeout: float = 30.0,
    ):
        self.app_id = app_id
        self.private_key = _load_private_key(private_key) if private_key else ""
        self.token = token
        self.timeout = timeout
        # installation id -> (token, expires_at)
        self._token_cache: dict[int, tuple[str, float]] = {}

    def _generate_jwt(self) -> str:
        now = int(time.time())
        payload = {
            "iat": now - 60,
            "exp": now + (10 * 60),
            "iss": self.app_id,
        }
        return jwt.encode(payload, self.private_key, algorithm="RS256")

    async def _get_token(self, installation_id: int | None) -> str:
        """Installation token when running as an App, else the plain token."""
        if not (self.app_id and self.private_key) or installation_id is None:
            if self.token:
                return self.token
            raise UpstreamError("No GitHub credentials available for this event", stage="auth")

        cached = self._token_cache.get(installation_id)
        if cached:
            token, expires_at = cached
            if time.time() < expires_at - 60:
                return token

        async with httpx.AsyncClient() as client:
            resp = await client.post(
                f"{GITHUB_API}/app/installations/{installation_id}/access_tokens",
                headers={
                    "Authorization": f"Bearer {self._generate_jwt()}",
                    "Accept": "application/vnd.github+json",
                },
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()

        token = data["token"]
        # Tokens last 1 hour; cache for 50 minutes
        self._token_cache[installation_id] = (token, time.time() + 3000)
        return token

    async def get_pr_diff(
        self, owner: str, repo: str, pr_number: int, installation_id: int | None = None
    ) -> str:
        """Fetch the unified diff for a pull request."""
        try:
            token = await self._get_token(installation_id)
            async with httpx.AsyncClient() as client:
                resp = await client.get(
                    f"{GITHUB_API}/repos/{owner}/{repo}/pulls/{pr_number}",
                    headers={
                        **_auth_headers(token),
                        "Accept": "application/vnd.github.diff",
                    },
                    timeout=self.timeout,
                )
                resp.raise_for_status()
                return resp.text
        except (httpx.HTTPError, jwt.PyJWTError, KeyError, TypeError, ValueError) as e:
            raise UpstreamError(f"Could not fetch diff for {owner}/{repo}#{pr_number}: {e}", stage="diff") from e

    async def get_pr(
        self, owner: str, repo: str, pr_number: int, installation_id: int | None = None
    ) -> dict:
        """Fetch PR metadata (author, stats, etc.)."""
        try:
            token = await self._get_token(installation_id)
            async with httpx.AsyncClient() as client:
                resp = await client.get(
                    f"{GITHUB_API}/repos/{owner}/{repo}/pulls/{pr_number}",
                    headers=_auth_headers(token),
                    timeout=self.timeout,
                )
                resp.raise_for_status()
                return resp.json()
        except (httpx.HTTPError, jwt.PyJWTError, KeyError, TypeError, ValueError) as e:
            raise UpstreamError(f"Could not fetch {owner}/{repo}#{pr_number}: {e}", stage="pr") from e

    async def post_issue_comment(
        self,
        owner: str,
        repo: str,
        issue_number: int,
        body: str,
        installation_id: int | None = None,
    ) -> dict:
        """Post a comment on an issue or PR."""
        try:
            token = await self._get_token(installation_id)
            async with httpx.AsyncClient() as client:
                resp = await client.post(
                    f"{GITHUB_API}/repos/{owner}/{repo}/issues/{issue_number}/comments",
                    headers=_auth_headers(token),
                    json={"body": body},
                    timeout=self.timeout,
                )
                resp.raise_for_status()
                return resp.json()
        except (httpx.HTTPError, jwt.PyJWTError, UpstreamError, KeyError, TypeError, ValueError) as e:
            raise DeliveryError(f"Could not comment on {owner}/{repo}#{issue_number}: {e}", stage="post") from e
