import os
from pathlib import Path

from dotenv import load_dotenv

from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_PHRASES_PATH = Path(__file__).parent / "degradation_phrases.yaml"


class Config:
    """Configuration management for the search orchestration service."""

    def __init__(self):
        """Initialize configuration with environment variables."""
        # Load environment variables from .env file if it exists
        env_path = Path(__file__).parent.parent / ".env"
        if env_path.exists():
            load_dotenv(dotenv_path=env_path)

        # Upstream search server
        self.SEARCH_API_BASE_URL = os.getenv("SEARCH_API_BASE_URL", "http://localhost:5000")
        self.SEARCH_TIMEOUT_S = float(os.getenv("SEARCH_TIMEOUT_S", "30"))
        self.SEARCH_API_TOKEN = os.getenv("SEARCH_API_TOKEN")

        # Degradation phrase table (versioned YAML)
        self.DEGRADATION_PHRASES_PATH = os.getenv(
            "DEGRADATION_PHRASES_PATH", str(DEFAULT_PHRASES_PATH)
        )

        # Type-ahead suggestions
        self.SUGGESTION_DEBOUNCE_MS = int(os.getenv("SUGGESTION_DEBOUNCE_MS", "300"))

        # Server authentication
        self.API_KEYS = [k.strip() for k in os.getenv("API_KEYS", "").split(",") if k.strip()]

    def credential_provider(self):
        """
        Return a callable yielding the bearer token for upstream requests.

        The identity provider is external; a static SEARCH_API_TOKEN stands in
        for a signed-in user when set.
        """
        token = self.SEARCH_API_TOKEN
        return (lambda: token) if token else None

    def validate(self) -> bool:
        """
        Validate that all required configuration is present.

        Returns:
            bool: True if configuration is valid, False otherwise
        """
        if not self.SEARCH_API_BASE_URL.startswith(("http://", "https://")):
            logger.error(f"SEARCH_API_BASE_URL must be an http(s) URL, got '{self.SEARCH_API_BASE_URL}'")
            return False
        if self.SEARCH_TIMEOUT_S <= 0:
            logger.error("SEARCH_TIMEOUT_S must be positive")
            return False
        if not Path(self.DEGRADATION_PHRASES_PATH).exists():
            logger.error(f"Degradation phrase table not found: {self.DEGRADATION_PHRASES_PATH}")
            return False
        if self.SUGGESTION_DEBOUNCE_MS < 0:
            logger.error("SUGGESTION_DEBOUNCE_MS must not be negative")
            return False

        return True

    @property
    def suggestion_debounce_s(self) -> float:
        return self.SUGGESTION_DEBOUNCE_MS / 1000.0
