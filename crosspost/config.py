from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Service
    service_name: str = "crosspost-api"
    debug: bool = False

    # Database
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "crosspost"
    db_user: str = "dbadmin"
    db_password: str = ""
    db_pool_size: int = 5

    # Authentication
    auth_enabled: bool = False  # Disable in development
    dev_user_id: str = "00000000-0000-0000-0000-000000000001"
    cognito_user_pool_id: str | None = None
    cognito_client_id: str | None = None
    cognito_region: str = "us-east-1"

    # OAuth state signing
    secret_key: str = "change-me-in-production"
    oauth_state_ttl_seconds: int = 600

    # Public URLs
    app_url: str = "http://localhost:5173"  # Frontend, target of OAuth redirects
    api_base_url: str = "http://localhost:8000"  # Used to build callback URIs

    # Provider OAuth clients (empty means "not configured")
    facebook_client_id: str = ""
    facebook_client_secret: str = ""
    instagram_client_id: str = ""
    instagram_client_secret: str = ""
    linkedin_client_id: str = ""
    linkedin_client_secret: str = ""
    x_client_id: str = ""
    x_client_secret: str = ""
    threads_client_id: str = ""
    threads_client_secret: str = ""
    tiktok_client_id: str = ""
    tiktok_client_secret: str = ""

    # Bluesky (direct credentials)
    bluesky_service_url: str = "https://bsky.social"

    # Publishing
    publish_concurrency: int = 5
    publish_timeout_seconds: float = 30.0
    http_timeout_seconds: float = 20.0
    report_unresolved_targets: bool = False
    max_request_bytes: int = 256 * 1024

    @property
    def database_url(self) -> str:
        return f"postgresql+asyncpg://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    def oauth_client(self, provider: str) -> tuple[str, str]:
        """Return (client_id, client_secret) for a provider, empty strings if unset."""
        return (
            getattr(self, f"{provider}_client_id", ""),
            getattr(self, f"{provider}_client_secret", ""),
        )

    def redirect_uri(self, provider: str) -> str:
        return f"{self.api_base_url.rstrip('/')}/api/v1/connections/{provider}/callback"

    def configured_providers(self) -> list[str]:
        """OAuth providers whose client id and secret are both set."""
        return [
            name
            for name in ("facebook", "instagram", "linkedin", "x", "threads", "tiktok")
            if all(self.oauth_client(name))
        ]

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
