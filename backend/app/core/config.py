from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import List, Any, Optional
import json
import tempfile
from pathlib import Path


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",  # Ignore extra fields in .env that aren't defined in Settings
    )

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "DiagramForge"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    API_VERSION: str = "v1"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # Kept as a raw string so pydantic-settings doesn't try to JSON-decode it
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://localhost:5173"

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./diagramforge.db"
    DB_ECHO: bool = False

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""  # Empty disables the rotating file handler

    # ==========================================
    # Spring project generation
    # ==========================================
    SPRING_TEMPLATE_DIR: Optional[str] = None  # None = packaged scaffold
    SCRATCH_DIR: Optional[str] = None  # None = system temp dir
    SCRATCH_PREFIX: str = "generated-demo"
    ARCHIVE_FILENAME: str = "demo_generated.zip"
    ARCHIVE_CHUNK_SIZE: int = 8192  # 8KB chunks
    ARCHIVE_COMPRESSION_LEVEL: int = 9
    CODEGEN_CONFLICT_POLICY: str = "last_wins"  # "last_wins" or "fail"

    # ==========================================
    # Request collection export
    # ==========================================
    COLLECTION_NAME: str = "Generated API Collections"
    COLLECTION_BASE_URL: str = "http://localhost:8080"

    @field_validator("CODEGEN_CONFLICT_POLICY")
    @classmethod
    def validate_conflict_policy(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("last_wins", "fail"):
            raise ValueError("CODEGEN_CONFLICT_POLICY must be 'last_wins' or 'fail'")
        return v

    @field_validator("ARCHIVE_COMPRESSION_LEVEL")
    @classmethod
    def validate_compression_level(cls, v: int) -> int:
        if not 0 <= v <= 9:
            raise ValueError("ARCHIVE_COMPRESSION_LEVEL must be between 0 and 9")
        return v

    @property
    def CORS_ORIGINS(self) -> List[str]:
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    @property
    def TEMPLATE_DIR(self) -> Path:
        """Location of the static Spring Boot scaffold copied into every project"""
        if self.SPRING_TEMPLATE_DIR:
            return Path(self.SPRING_TEMPLATE_DIR)
        return Path(__file__).resolve().parent.parent / "templates" / "spring_demo"

    @property
    def SCRATCH_ROOT(self) -> Path:
        return Path(self.SCRATCH_DIR) if self.SCRATCH_DIR else Path(tempfile.gettempdir())


# Create settings instance
settings = Settings()
