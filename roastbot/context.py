"""Static prompt context: author profiles and the team style guide.

Both are plain data loaded once at startup and queried synchronously.
Missing files or unknown authors simply mean "no context".
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class StaticContext:
    author_profiles: dict[str, str] = field(default_factory=dict)
    style_guide: str | None = None

    def __post_init__(self) -> None:
        # Lookups are by lowercase login, so normalize the keys once here
        self.author_profiles = {
            login.lower(): text.strip()
            for login, text in self.author_profiles.items()
            if text and text.strip()
        }
        if self.style_guide is not None and not self.style_guide.strip():
            self.style_guide = None

    def author_context(self, login: str) -> str | None:
        return self.author_profiles.get(login.lower())

    @classmethod
    def load(cls, profiles_path: str = "", style_guide_path: str = "") -> StaticContext:
        """Load profiles (JSON object) and style guide (text) from disk.

        Empty paths are skipped. A configured path that does not exist is a
        startup error.
        """
        profiles: dict[str, str] = {}
        if profiles_path:
            data = json.loads(Path(profiles_path).read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError(f"Author profiles must be a JSON object: {profiles_path}")
            profiles = {str(k): str(v) for k, v in data.items()}
            logger.info("Loaded %d author profiles from %s", len(profiles), profiles_path)

        style_guide = None
        if style_guide_path:
            style_guide = Path(style_guide_path).read_text(encoding="utf-8")
            logger.info("Loaded style guide from %s (%d chars)", style_guide_path, len(style_guide))

        return cls(author_profiles=profiles, style_guide=style_guide)
