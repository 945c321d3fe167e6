"""Roastbot GitHub App — webhook server that roasts pull requests."""

from __future__ import annotations

import asyncio
import hashlib
import hmac
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Header, HTTPException, Request

from roastbot.config import Settings, settings
from roastbot.logging_config import setup_logging
from roastbot.pipeline import RoastPipeline, build_pipeline
from roastbot.webhooks import handle_pull_request, parse_event

logger = logging.getLogger(__name__)


def verify_signature(secret: str, payload_body: bytes, signature: str | None) -> bool:
    """Verify the webhook payload against the GitHub signature."""
    if not secret:
        # No secret configured — skip verification (dev mode)
        return True
    if not signature:
        return False

    expected = hmac.new(secret.encode(), payload_body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(f"sha256={expected}", signature)


def create_app(app_settings: Settings = settings, pipeline: RoastPipeline | None = None) -> FastAPI:
    """Build the webhook app. A pre-built pipeline skips the startup secret check."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(app_settings.log_level, json_format=app_settings.log_json)
        if pipeline is None:
            missing = app_settings.missing_secrets()
            if missing:
                raise RuntimeError(f"Missing required configuration: {', '.join(missing)}")
            app.state.pipeline = build_pipeline(app_settings)
        yield
        if app.state.tasks:
            logger.info("Waiting for %d in-flight roast(s)", len(app.state.tasks))
            await asyncio.gather(*app.state.tasks, return_exceptions=True)

    app = FastAPI(title="Roastbot GitHub App", version="0.1.0", lifespan=lifespan)
    app.state.pipeline = pipeline
    # Strong references so background roasts are not garbage collected mid-run
    app.state.tasks = set()

    @app.get("/health")
    async def health():
        return {"status": "ok", "app": "roastbot"}

    @app.post("/webhooks/github")
    async def github_webhook(
        request: Request,
        x_github_event: str = Header(None),
        x_hub_signature_256: str = Header(None),
    ):
        """Receive and dispatch GitHub webhook events."""
        body = await request.body()

        if not verify_signature(app_settings.github_webhook_secret, body, x_hub_signature_256):
            raise HTTPException(status_code=401, detail="Invalid signature")

        try:
            payload = await request.json()
        except ValueError:
            raise HTTPException(status_code=400, detail="Body is not JSON")
        if not isinstance(payload, dict):
            raise HTTPException(status_code=400, detail="Body is not a JSON object")
        action = payload.get("action", "")
        logger.info("Received event: %s.%s", x_github_event, action)

        event = parse_event(x_github_event, payload)
        if event is None:
            logger.debug("Ignoring event: %s.%s", x_github_event, action)
            return {"status": "ignored"}

        # Run in background so we respond 200 quickly
        task = asyncio.create_task(handle_pull_request(app.state.pipeline, event))
        app.state.tasks.add(task)
        task.add_done_callback(app.state.tasks.discard)
        return {"status": "accepted"}

    return app


app = create_app()
