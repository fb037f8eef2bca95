from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .oauth import Credentials

logger = logging.getLogger(__name__)


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def write_json(path: Path, data: Any) -> None:
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False))


def read_json(path: Path) -> Any:
    return json.loads(path.read_text())


def token_path(base_dir: Path) -> Path:
    return base_dir / "tokens.json"


class TokenStore:
    """Keeps the OAuth token pair on disk between runs."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self, credentials: Credentials) -> bool:
        if not self.path.exists():
            return False
        data = read_json(self.path)
        if data.get("client_id") != credentials.client_id:
            logger.info("Ignoring cached tokens issued to a different client id")
            return False
        credentials.token = data.get("access_token")
        credentials.refresh_token = data.get("refresh_token")
        expires_at = data.get("expires_at")
        credentials.expires_at = datetime.fromisoformat(expires_at) if expires_at else None
        return True

    def save(self, credentials: Credentials) -> None:
        ensure_dir(self.path.parent)
        write_json(
            self.path,
            {
                "client_id": credentials.client_id,
                "access_token": credentials.token,
                "refresh_token": credentials.refresh_token,
                "expires_at": credentials.expires_at.isoformat() if credentials.expires_at else None,
            },
        )
