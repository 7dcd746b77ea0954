# backend/salescast/core/config.py

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_env: str = "dev"
    log_level: str = "INFO"

    database_url: str = "sqlite:///./salescast.db"

    # Signs the session cookie and the OAuth state cookie.
    # Put this on Render as SESSION_SECRET
    session_secret: str = "dev-secret-change-me"
    session_cookie_name: str = "salescast_session"
    session_ttl_minutes: int = 24 * 60

    google_client_id: str = ""
    google_client_secret: str = ""
    google_redirect_uri: str = "http://localhost:5000/auth/google/callback"

    # Example: CORS_ORIGINS="https://salescast.onrender.com,http://localhost:5173"
    cors_origins: str = ""
    frontend_dist: str = "client/dist"

    class Config:
        env_file = ".env"

    @property
    def allow_origins(self) -> list[str]:
        origins = [o.strip() for o in self.cors_origins.split(",") if o.strip()]
        return origins or ["http://localhost:5173"]

    @property
    def secure_cookies(self) -> bool:
        return self.app_env not in ("dev", "test")


settings = Settings()
