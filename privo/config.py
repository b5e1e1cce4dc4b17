"""Privo Club Server Configuration."""

import secrets
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server
    server_name: str = "Privo Club Server"
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False
    environment: str = "development"  # 'development' | 'production'
    allowed_origins: list[str] = ["http://localhost:3000"]

    # Paths
    data_dir: Path = Path.home() / "privo" / "data"
    upload_dir: Path = Path.home() / "privo" / "uploads"

    # Database
    db_path: Path = Path.home() / "privo" / "data" / "privo.db"
    db_busy_timeout: float = 30.0  # seconds

    # JWT (shared with the identity provider)
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 1440  # 24 hours

    # Invite codes
    invite_code_length: int = 12
    code_generation_attempts: int = Field(default=5, ge=1)
    join_retry_attempts: int = Field(default=3, ge=1)

    # Memory vault
    vault_unlock_hours: int = 24

    # Media
    max_upload_bytes: int = 10 * 1024 * 1024  # 10 MB

    # Logging
    log_level: str = "INFO"
    log_file_path: Path | None = None

    model_config = {"env_prefix": "PRIVO_"}

    def ensure_dirs(self) -> None:
        """Create all required directories."""
        for d in [self.data_dir, self.upload_dir, self.db_path.parent]:
            d.mkdir(parents=True, exist_ok=True)

    def ensure_secrets(self) -> None:
        """Generate the JWT secret if not set, persist it so it survives restarts."""
        secrets_file = self.data_dir / ".secrets"
        saved = {}
        if secrets_file.exists():
            for line in secrets_file.read_text().strip().splitlines():
                if "=" in line:
                    k, v = line.split("=", 1)
                    saved[k.strip()] = v.strip()

        if not self.jwt_secret:
            self.jwt_secret = saved.get("jwt_secret", "") or secrets.token_urlsafe(32)

        secrets_file.write_text(f"jwt_secret={self.jwt_secret}\n")


settings = Settings()
settings.ensure_dirs()
settings.ensure_secrets()
