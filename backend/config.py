"""
TechDoc - Configuration Module
"""
import os
from pathlib import Path
from pydantic_settings import BaseSettings

# Compute paths at module level for consistency
_BASE_DIR = Path(__file__).parent.parent

# Data directory: use TECHDOC_DATA_DIR env var, or default to ~/.techdoc
_DATA_DIR = Path(os.environ.get("TECHDOC_DATA_DIR", Path.home() / ".techdoc"))


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "TechDoc"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Paths
    BASE_DIR: Path = _BASE_DIR
    DATA_DIR: Path = _DATA_DIR
    TEMPLATES_DIR: Path = _DATA_DIR / "templates"
    GLOSSARIES_DIR: Path = _DATA_DIR / "glossaries"

    # Translation Settings
    SOURCE_LANG: str = "he"
    TARGET_LANG: str = "ru"
    FALLBACK_ENGINE: str = "identity"  # identity, google
    # Longest multi-word glossary term matched by the translator
    MAX_PHRASE_TOKENS: int = 3
    # Entries kept per memo cache (fallback engine, template translator)
    TRANSLATION_CACHE_SIZE: int = 2048

    # Morphology Settings
    # Shortest remainder accepted after stripping a prefix/suffix
    HEBREW_MIN_STEM_LENGTH: int = 3
    RUSSIAN_MIN_STEM_LENGTH: int = 3

    # Rendering Settings
    DATE_FORMAT: str = "%Y-%m-%d"
    LIST_SEPARATOR: str = ", "
    TABLE_ROW_SEPARATOR: str = "; "
    TABLE_CELL_SEPARATOR: str = " | "

    class Config:
        env_prefix = "TECHDOC_"
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
