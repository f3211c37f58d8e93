"""Runtime settings for the tutor, read from the environment."""

from __future__ import annotations as _annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Tutor settings.

    Setting ``api_key`` or ``base_url`` binds an OpenAI-compatible endpoint;
    ``model`` must then carry the ``openai:`` prefix or no provider prefix.
    """

    model: str = "openai:gpt-4o"
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    fps: float = 60.0
    host: str = "127.0.0.1"
    port: int = 8000

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from CELLMATE_* environment variables."""
        return cls(
            model=os.getenv("CELLMATE_MODEL", cls.model).strip(),
            api_key=os.getenv("CELLMATE_API_KEY") or None,
            base_url=os.getenv("CELLMATE_BASE_URL") or None,
            fps=float(os.getenv("CELLMATE_FPS", cls.fps)),
            host=os.getenv("CELLMATE_HOST", cls.host),
            port=int(os.getenv("CELLMATE_PORT", cls.port)),
        )

    @property
    def frame_interval(self) -> float:
        return 1.0 / self.fps if self.fps > 0 else 1.0 / 60.0
