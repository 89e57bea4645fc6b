import os
from typing import Annotated

from dotenv import load_dotenv
from pydantic import AnyHttpUrl
from pydantic import Field
from pydantic import TypeAdapter
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    PROJECT_NAME: Annotated[
        str, Field(default="Coach Platform API", validation_alias="PROJECT_NAME")
    ]
    APP_NAME: Annotated[str, Field(default="coach-api", validation_alias="APP_NAME")]
    LOG_LEVEL: Annotated[str, Field(default="INFO", validation_alias="LOG_LEVEL")]
    DEBUG: bool = False

    # JSON list of accepted CORS origins
    CORS_ORIGINS: list[AnyHttpUrl] = TypeAdapter(list[AnyHttpUrl]).validate_json(
        os.getenv("CORS_ORIGINS", "[]")
    )

    # Postgres
    DATABASE_URL: Annotated[
        str | None, Field(default=None, validation_alias="DATABASE_URL")
    ]
    POSTGRES_HOST: Annotated[
        str, Field(default="localhost", validation_alias="POSTGRES_HOST")
    ]
    POSTGRES_USER: Annotated[
        str, Field(default="postgres", validation_alias="POSTGRES_USER")
    ]
    POSTGRES_PASSWORD: Annotated[
        str, Field(default="postgres", validation_alias="POSTGRES_PASSWORD")
    ]
    POSTGRES_PORT: Annotated[
        int, Field(default=5432, validation_alias="POSTGRES_PORT", gt=1024, lt=65536)
    ]
    POSTGRES_DB: Annotated[str, Field(default="coach", validation_alias="POSTGRES_DB")]
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_RECYCLE: int = 1800
    DB_CONNECT_TIMEOUT: int = 10

    # Registration
    BCRYPT_ROUNDS: Annotated[
        int, Field(default=10, validation_alias="BCRYPT_ROUNDS", ge=4, le=31)
    ]
    USERNAME_MAX_ATTEMPTS: Annotated[
        int, Field(default=5, validation_alias="USERNAME_MAX_ATTEMPTS", ge=1)
    ]
    VERIFICATION_CODE_LENGTH: Annotated[
        int, Field(default=6, validation_alias="VERIFICATION_CODE_LENGTH", ge=4, le=12)
    ]
    VERIFICATION_CODE_EXPIRE_MINUTES: Annotated[
        int, Field(default=15, validation_alias="VERIFICATION_CODE_EXPIRE_MINUTES", gt=0)
    ]
    # Replace raw exception text in 500 responses with a generic message
    MASK_ERROR_DETAILS: bool = False

    # Email provider
    EMAIL_API_URL: Annotated[
        str | None, Field(default=None, validation_alias="EMAIL_API_URL")
    ]
    EMAIL_API_KEY: Annotated[
        str | None, Field(default=None, validation_alias="EMAIL_API_KEY")
    ]
    EMAIL_FROM: Annotated[
        str, Field(default="no-reply@example.com", validation_alias="EMAIL_FROM")
    ]
    EMAIL_HTTP_TIMEOUT: float = 10.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
    )

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        user = self.POSTGRES_USER
        password = self.POSTGRES_PASSWORD
        host = self.POSTGRES_HOST
        port = self.POSTGRES_PORT
        db = self.POSTGRES_DB
        return f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{db}"

    @property
    def is_postgres(self) -> bool:
        return self.database_url.startswith("postgresql")


settings = Settings()
