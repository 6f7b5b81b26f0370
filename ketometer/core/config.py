"""
Configuration and constants for the Ketometer analysis service.
"""
import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # OpenAI Configuration
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_TEXT_MODEL: str = os.getenv("OPENAI_TEXT_MODEL", "gpt-4o-mini")
    OPENAI_VISION_MODEL: str = os.getenv("OPENAI_VISION_MODEL", "gpt-4o-mini")
    OPENAI_MAX_TOKENS: int = int(os.getenv("OPENAI_MAX_TOKENS", 2000))

    # Upstream call policy
    OPENAI_TIMEOUT_SECONDS: float = float(os.getenv("OPENAI_TIMEOUT_SECONDS", 60))
    OPENAI_CONNECT_TIMEOUT_SECONDS: float = float(os.getenv("OPENAI_CONNECT_TIMEOUT_SECONDS", 10))
    OPENAI_MAX_ATTEMPTS: int = int(os.getenv("OPENAI_MAX_ATTEMPTS", 2))

    # Server Configuration
    PORT: int = int(os.getenv("PORT", 10000))
    HOST: str = "0.0.0.0"

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() != "false"
    ANALYSIS_RATE_LIMIT: str = os.getenv("ANALYSIS_RATE_LIMIT", "20/minute")

    # Optional shared key expected from the mobile client
    KETOMETER_API_KEY: str = os.getenv("KETOMETER_API_KEY", "")

    # AI Temperature Settings
    TEMPERATURE_ANALYSIS: float = 0.3

    # Image limits
    MAX_IMAGES: int = int(os.getenv("MAX_IMAGES", 10))
    MAX_IMAGE_BYTES: int = 20 * 1024 * 1024  # 20 MB per image
    MAX_IMAGE_DIMENSION: int = 2048          # Long edge in pixels before downscaling

    @classmethod
    def validate(cls) -> None:
        """Validate required configuration on startup."""
        missing = []

        if not cls.OPENAI_API_KEY:
            missing.append("OPENAI_API_KEY")

        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}. "
                "Please check your .env file."
            )


settings = Settings()
