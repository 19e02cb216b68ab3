from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    ENV: str = "local"
    DB_HOST: str = "db"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "postgres"
    DB_NAME: str = "kempoverse"
    # Full URL wins over the parts above (sqlite in tests, managed DBs in prod)
    DATABASE_URL_OVERRIDE: str | None = Field(default=None, validation_alias="DATABASE_URL")

    # Auth: one shared password, tokens signed with AUTH_SECRET
    AUTH_PASSWORD: str = "change-me"
    AUTH_SECRET: str = "dev-secret-change-me"       # set a strong one in prod
    TOKEN_TTL_HOURS: int = 24

    # Images
    IMAGE_STORAGE_DIR: str = "./media"
    IMAGE_PUBLIC_BASE_URL: str = "/media"
    MAX_IMAGE_BYTES: int = 5 * 1024 * 1024

    ALLOW_ORIGINS: str = "*"
    LOG_LEVEL: str = "INFO"
    API_VERSION: str = "dev"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return (
            f"postgresql+psycopg://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

@lru_cache
def get_settings() -> Settings:
    return Settings()
