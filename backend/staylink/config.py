from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Supabase (PostgREST data API)
    supabase_url: str = "http://localhost:54321"
    supabase_anon_key: str = ""
    supabase_service_role_key: str = ""
    rooms_table: str = "rooms"
    postgrest_timeout: float = 15.0

    # Clerk (identity provider)
    clerk_secret_key: str = ""
    clerk_api_url: str = "https://api.clerk.com/v1"
    clerk_jwt_public_key: str = ""
    clerk_jwt_algorithm: str = "RS256"

    # Redis
    redis_url: str = "redis://localhost:6379/0"
    organization_cache_ttl: int = 300

    # CORS
    cors_origins: str = "http://localhost:3000"

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def postgrest_url(self) -> str:
        return f"{self.supabase_url.rstrip('/')}/rest/v1"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
