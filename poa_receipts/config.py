"""
Application settings (environment / .env sourced).
"""
from typing import List, Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server
    HOST: str = "localhost"
    PORT: int = 3001

    # Webhook authentication (Bearer token shared with the chain indexer)
    WEBHOOK_SECRET: str = "dev-webhook-secret"

    # Storage
    DATABASE_URL: str = "sqlite:///./data/receipts.db"
    DATA_DIR: str = "./data"

    # Public receipt URL base
    PUBLIC_BASE_URL: str = "http://localhost:3001"

    # Contract info (informational only)
    CONTRACT_ADDRESS: str = "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"
    CONTRACT_NAME: str = "proof-of-action"

    # Block explorer
    STACKS_NETWORK: Literal["mainnet", "testnet"] = "testnet"
    EXPLORER_API_TIMEOUT: float = 10.0

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    DEBUG: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
