from pydantic_settings import BaseSettings
from typing import List, Union, Optional
from pydantic import field_validator


class Settings(BaseSettings):
    # Database
    POSTGRES_USER: str = "multicat"
    POSTGRES_PASSWORD: str
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "multicat"
    DATABASE_URL_OVERRIDE: Optional[str] = None  # e.g. sqlite:///./multicat.db

    @property
    def DATABASE_URL(self) -> str:
        """Construct database URL from components."""
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # Taxonomy
    CATEGORY_EXTENSION: str = "com_content"  # Categories outside this key are never read

    # Diagnostics
    ENABLE_LOGGING: bool = False  # Soft failures of the association layer are logged only when set
    DIAGNOSTICS_LOG_FILE: Optional[str] = None  # Optional plain-text copy of diagnostic lines

    # Application
    SECRET_KEY: str  # Signs the session cookie holding pending edits
    DEBUG: bool = False
    CORS_ORIGINS: Union[List[str], str] = ["http://localhost:3000"]
    RATE_LIMIT_DEFAULT: str = "100/minute"

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            # Split by comma or keep as single item
            return [origin.strip() for origin in v.split(",")]
        return v

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env


settings = Settings()
