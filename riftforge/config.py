from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "RiftForge"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/riftforge"

    # Local snapshot of the card catalog (written by jobs.download_catalog)
    card_catalog_path: str = "data/cards.json"
    card_api_url: str = "http://localhost:3001/v1"

    # Cards tagged "Unique" are capped at one copy in the main deck.
    # Set to False to apply the regular copy limit to them as well.
    enforce_unique_copy_limit: bool = True


settings = Settings()


# =============================================================================
# DECK CONSTRUCTION LIMITS
# =============================================================================

MAIN_DECK_SIZE = 40
RUNE_DECK_SIZE = 12

# Maximum copies of a single card within a section
MAIN_COPY_LIMIT = 3
RUNE_COPY_LIMIT = 1
UNIQUE_COPY_LIMIT = 1

BATTLEFIELD_POSITIONS = (1, 2, 3)
