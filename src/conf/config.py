from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database settings
    sqlalchemy_database_url: str = "sqlite:///./kinship.db"

    # Storage settings
    storage_backend: str = "sql"
    storage_key: str = "kinship_contacts_v1"
    reseed_when_empty: bool = True

    # Redis settings
    redis_host: str = 'localhost'
    redis_port: int = 6379

    # Assistant settings
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.5-flash"
    assistant_timeout: float = 30.0


settings = Settings()
