"""Application settings loaded from environment variables via pydantic-settings.

# --- HOW SETTINGS WORK ---------------------------------------------------
#
# Values are read from two sources (in priority order):
#
#   1. **Environment variables** -- e.g. LLM_OCR_ENDPOINT=https://ocr.local/v1
#   2. **.env file** -- key=value lines in the project root .env file
#
# Field ``llm_ocr_endpoint`` maps to env var ``LLM_OCR_ENDPOINT``.
#
# Tuning fields default to ``None``, meaning "not set here": the YAML value
# in config/config.yaml (or the component default) applies.  Only values
# actually present in the environment override the YAML file.
# -------------------------------------------------------------------------
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """clausefinder application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === App Config ===
    app_env: str | None = None
    log_level: str | None = None
    config_path: str = "config/config.yaml"

    # === OCR fallback ===
    # Empty string = "not configured": scanned PDFs are then skipped with
    # reason "no extractable text" instead of being sent to OCR.
    llm_ocr_endpoint: str = ""
    llm_ocr_api_key: str = ""
    llm_ocr_timeout_seconds: float | None = None

    # === Ingestion ===
    ingest_max_workers: int | None = None

    # === Search ===
    search_backend_timeout_seconds: float | None = None
    search_degrade_on_backend_failure: bool | None = None

    def ocr_configured(self) -> bool:
        """Return ``True`` if an OCR endpoint is set."""
        return bool(self.llm_ocr_endpoint)
