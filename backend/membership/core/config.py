from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "Workspace Membership"
    API_V1_STR: str = "/api/v1"

    MONGODB_URL: str
    DATABASE_NAME: str = "workspace_membership"

    # Bearer tokens are issued by the identity provider and signed with this key
    SECRET_KEY: str
    ALGORITHM: str = "HS256"

    # "self_hosted" or "cloud". Only cloud deployments gate on billing.
    DEPLOYMENT_MODE: str = "self_hosted"

    # Billing (Stripe)
    STRIPE_SECRET_KEY: str = ""
    STRIPE_TIMEOUT_SECONDS: int = 20

    # Identity provider (magic-link dispatch)
    AUTH_BASE_URL: str = "http://localhost:3000/api/auth"
    AUTH_API_KEY: str = ""
    AUTH_TIMEOUT_SECONDS: float = 10.0

    # Invite links
    INVITE_CODE_LENGTH: int = 12
    INVITE_CODE_MAX_ATTEMPTS: int = 3
    INVITE_LINK_DEFAULT_DAYS: int = 7
    INVITE_LINK_MAX_DAYS: int = 30

    # Frontend
    FRONTEND_BASE_URL: str = "http://localhost:3000"

    LOG_LEVEL: str = "INFO"

    class Config:
        case_sensitive = True
        env_file = ".env"


settings = Settings()
