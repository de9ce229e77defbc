# config.py
import os
from typing import List, Optional
from urllib.parse import quote_plus

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://localhost:5174"


class Settings(BaseModel):
    """Process-wide configuration, read once from the environment at startup."""

    model_config = ConfigDict(frozen=True)

    db_user: Optional[str] = None
    db_pass: Optional[str] = None
    db_host: str = "cluster0.mongodb.net"
    db_name: str = "assignmentDB"
    mongodb_uri_override: Optional[str] = None

    token_secret: Optional[str] = None

    host: str = "0.0.0.0"
    port: int = 5000
    cors_origins: str = DEFAULT_CORS_ORIGINS

    storage_bucket: Optional[str] = None
    storage_credentials_file: Optional[str] = None
    storage_endpoint_url: Optional[str] = None
    storage_region: Optional[str] = None
    storage_public_base_url: str = "https://firebasestorage.googleapis.com"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        return cls(
            db_user=os.getenv("DB_USER"),
            db_pass=os.getenv("DB_PASS"),
            db_host=os.getenv("DB_HOST", "cluster0.mongodb.net"),
            db_name=os.getenv("DB_NAME", "assignmentDB"),
            mongodb_uri_override=os.getenv("MONGODB_URI"),
            token_secret=os.getenv("ACCESS_TOKEN_SECRET"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "5000")),
            cors_origins=os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS),
            storage_bucket=os.getenv("STORAGE_BUCKET"),
            storage_credentials_file=os.getenv("STORAGE_CREDENTIALS_FILE"),
            storage_endpoint_url=os.getenv("STORAGE_ENDPOINT_URL"),
            storage_region=os.getenv("STORAGE_REGION"),
            storage_public_base_url=os.getenv(
                "STORAGE_PUBLIC_BASE_URL", "https://firebasestorage.googleapis.com"
            ),
        )

    @property
    def mongodb_uri(self) -> str:
        if self.mongodb_uri_override:
            return self.mongodb_uri_override
        if self.db_user and self.db_pass:
            return (
                f"mongodb+srv://{quote_plus(self.db_user)}:{quote_plus(self.db_pass)}"
                f"@{self.db_host}/?retryWrites=true&w=majority"
            )
        return "mongodb://localhost:27017"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
