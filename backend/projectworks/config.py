from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "ProjectWorks API"
    app_env: str = "development"
    cors_origins: str = "http://localhost:3000"
    cors_allow_credentials: bool = True
    log_level: str = "INFO"
    request_id_header: str = "X-Request-ID"
    auth_enabled: bool = False
    cognito_region: str = ""
    cognito_user_pool_id: str = ""
    cognito_app_client_id: str = ""
    cognito_issuer: str = ""
    # Claim carrying the subscription plan (FREE|PRO) on Cognito tokens.
    tier_claim: str = "custom:plan"
    # Tier used for every request while auth is disabled (local development).
    default_tier: str = "FREE"

    aws_region: str = "us-east-1"
    bedrock_model_id: str = "amazon.nova-pro-v1:0"
    # Optional second model tried on alternate attempts; empty disables the fallback.
    bedrock_fallback_model_id: str = "amazon.nova-lite-v1:0"
    agent_temperature: float = 0.3
    agent_max_tokens: int = 8000
    plan_generation_max_attempts: int = 3
    max_upload_file_bytes: int = 10 * 1024 * 1024
    max_document_chars: int = 12000
    max_prompt_chars: int = 4000

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


settings = Settings()
