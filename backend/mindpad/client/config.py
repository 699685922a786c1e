"""
MindPad Client — Configuration
===============================

Read from MINDPAD_-prefixed environment variables (or .env):

    MINDPAD_API_URL            Base URL of the MindPad service
    MINDPAD_AUTOSAVE_DELAY_MS  Editor debounce before a save is sent
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class ClientSettings(BaseSettings):
    api_url: str = Field(default="http://localhost:8000", description="MindPad service base URL")
    autosave_delay_ms: int = Field(default=500, ge=0, le=60_000)

    model_config = {
        "env_prefix": "MINDPAD_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @property
    def autosave_delay(self) -> float:
        """Debounce delay in seconds."""
        return self.autosave_delay_ms / 1000


client_settings = ClientSettings()
