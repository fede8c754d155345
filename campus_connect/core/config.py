from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str

    # If DEV and you hit SSL cert issues on Windows, set DB_SSL_VERIFY=false in .env
    DB_SSL_VERIFY: bool = True

    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    EMAIL_VERIFY_EXPIRE_HOURS: int = 24

    # Block password sign-in until the emailed verification link is used
    REQUIRE_EMAIL_VERIFICATION: bool = True

    ENV: str = "dev"  # "dev", "test" or "prod"
    LOG_LEVEL: str = "INFO"

    # --- SUPABASE STORAGE (profile pictures) ---
    SUPABASE_URL: str | None = None
    SUPABASE_KEY: str | None = None
    PROFILE_BUCKET: str = "profile-pictures"
    MAX_PROFILE_PICTURE_BYTES: int = 2 * 1024 * 1024

    # --- EMAIL SETTINGS ---
    SMTP_HOST: str | None = None
    SMTP_PORT: int = 2525  # Default to Mailtrap port
    SMTP_USER: str | None = None
    SMTP_PASSWORD: str | None = None
    EMAILS_FROM_EMAIL: str = "no-reply@spc.edu"
    EMAILS_FROM_NAME: str = "SPC Campus Connect"
    FRONTEND_URL: str = "http://localhost:5173"
    API_URL: str = "http://localhost:8000"

    # --- RATE LIMITING ---
    REDIS_URL: str | None = None
    RATE_LIMIT_ENABLED: bool = True

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
