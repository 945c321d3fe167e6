import logging

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Roastbot settings, loaded from environment variables and .env file.

    Required secrets (checked at startup by ``missing_secrets``):
        LLM_API_KEY         - API key for the completion provider (passed to litellm)
        GIPHY_API_KEY       - Giphy API key for GIF lookups
        GITHUB_APP_ID + GITHUB_PRIVATE_KEY, or GITHUB_TOKEN
    """

    model_config = {"env_file": ".env", "extra": "ignore"}

    # LLM (litellm model string)
    llm_api_key: str = ""
    llm_model: str = "gpt-4o-mini"
    roast_temperature: float = 0.9
    roast_max_tokens: int = 300
    search_term_temperature: float = 0.7
    search_term_max_tokens: int = 20
    llm_timeout_seconds: float = 60.0

    # Giphy
    giphy_api_key: str = ""
    giphy_rating: str = "pg"

    # GitHub App credentials
    github_app_id: str = ""
    github_private_key: str = ""  # PEM contents or path to .pem file
    github_webhook_secret: str = ""
    # Plain token, used when no App credentials are configured
    github_token: str = ""
    http_timeout_seconds: float = 30.0

    # Triggers
    trigger_label: str = "truss-review"
    roast_on_open: bool = True
    roast_on_synchronize: bool = True

    # Prompt context
    author_profiles_path: str = ""  # JSON object: github login -> free text
    style_guide_path: str = ""
    max_diff_chars: int = 20000

    # Server
    log_level: str = "INFO"
    log_json: bool = False
    host: str = "0.0.0.0"
    port: int = 3000

    @property
    def uses_github_app(self) -> bool:
        return bool(self.github_app_id and self.github_private_key)

    def missing_secrets(self) -> list[str]:
        """Return the env var names of required secrets that are not set."""
        missing = []
        if not self.llm_api_key:
            missing.append("LLM_API_KEY")
        if not self.giphy_api_key:
            missing.append("GIPHY_API_KEY")
        if not self.uses_github_app and not self.github_token:
            missing.append("GITHUB_APP_ID/GITHUB_PRIVATE_KEY or GITHUB_TOKEN")
        return missing


settings = Settings()

if not settings.github_webhook_secret:
    logger.warning("GITHUB_WEBHOOK_SECRET is not set — webhook signatures will not be verified")
