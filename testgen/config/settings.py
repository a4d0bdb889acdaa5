from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


PACKAGE_ROOT = Path(__file__).resolve().parent.parent

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"


class Settings(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "AI Test Generator"
    app_version: str = "1.0.0"
    app_author: str = "Artnestico"
    app_description: str = "Generates two-variant printable assessments from source text"
    cors_allow_origins: List[str] = ["*"]
    log_level: str = "INFO"

    html_template_dir: Path = PACKAGE_ROOT / "templates"
    output_dir: Path = Path("storage") / "assessments"

    # Gemini generateContent endpoint
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.0-flash-exp"
    gemini_endpoint: Optional[str] = None

    temperature: float = 0.7
    top_k: int = 40
    top_p: float = 0.95
    max_output_tokens: int = 8192

    max_retries: int = 3
    retry_delay_ms: int = 2000
    request_timeout_seconds: Optional[float] = None

    # Document style
    document_font: str = "Times-Roman"
    document_bold_font: str = "Times-Bold"
    document_font_path: Optional[Path] = None
    document_bold_font_path: Optional[Path] = None
    document_font_size: float = 12
    document_line_spacing: float = 1.15
    margin_top_mm: float = 25.4
    margin_right_mm: float = 25.4
    margin_bottom_mm: float = 25.4
    margin_left_mm: float = 25.4

    @property
    def generation_endpoint(self) -> str:
        if self.gemini_endpoint:
            return self.gemini_endpoint
        return f"{GEMINI_BASE_URL}/{self.gemini_model}:generateContent"


settings = Settings()
