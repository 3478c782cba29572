from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ---- App ----
    app_env: str = "local"  # local|dev|prod
    app_name: str = "EstateFlow Pro"
    app_version: str = "0.1.0"
    database_url: str = "sqlite:///./estateflow.db"

    # ---- CORS (used by main.py) ----
    cors_allow_origins: list[str] | str = ["*"]

    # ---- Auth ----
    auth_mode: str = "dev"  # dev|off
    dev_header_user_id: str = "X-User-Id"
    dev_header_user_role: str = "X-User-Role"
    default_role: str = "agent"

    # ---- Logging ----
    log_level: str = "INFO"
    sql_log_level: str = "WARNING"

    # ---- Portals ----
    # subset of the built-in portal vocabulary; unknown names are ignored
    portals: list[str] = ["property_finder", "bayut", "dubizzle"]

    # ---- Portal location lookup ----
    property_finder_base_url: str = "https://atlas.propertyfinder.com/v1"
    property_finder_api_key: str | None = None
    property_finder_timeout_seconds: float = 20.0
    portal_locations_csv: str | None = None
    location_search_limit: int = 20

    # ---- Pagination ----
    default_page_size: int = 10
    max_page_size: int = 100

    def model_post_init(self, __context) -> None:
        env = (self.app_env or "local").strip().lower()
        is_prod = env in ("prod", "production")

        if is_prod:
            if (self.auth_mode or "").strip().lower() == "dev":
                raise ValueError("SECURITY: auth_mode=dev is not allowed in prod")

            origins = self.cors_allow_origins
            if origins == "*" or origins == ["*"] or (isinstance(origins, str) and "*" in origins):
                raise ValueError("SECURITY: cors_allow_origins wildcard is not allowed in prod")


settings = Settings()
