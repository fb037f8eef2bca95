from __future__ import annotations

import importlib
import importlib.util
import os
from pathlib import Path
from typing import Mapping

from pydantic import BaseModel

from .errors import ConfigError
from .oauth import DEFAULT_AUTH_URL, DEFAULT_TOKEN_URL, Credentials


def load_dotenv() -> None:
    if importlib.util.find_spec("dotenv") is None:
        return
    dotenv = importlib.import_module("dotenv")
    dotenv.load_dotenv()


class Settings(BaseModel):
    client_id: str
    client_secret: str
    portal: str
    project: str | None = None
    data_dir: Path = Path("./zp_data")
    auth_url: str = DEFAULT_AUTH_URL
    token_url: str = DEFAULT_TOKEN_URL

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        if environ is None:
            load_dotenv()
            environ = os.environ
        missing = [
            name
            for name in ("ZOHO_CLIENT_ID", "ZOHO_CLIENT_SECRET", "ZOHO_PORTAL")
            if not environ.get(name)
        ]
        if missing:
            raise ConfigError(f"{', '.join(missing)} must be set in the environment.")
        return cls(
            client_id=environ["ZOHO_CLIENT_ID"],
            client_secret=environ["ZOHO_CLIENT_SECRET"],
            portal=environ["ZOHO_PORTAL"],
            project=environ.get("ZOHO_PROJECT") or None,
            data_dir=Path(environ.get("ZP_DATA_DIR", "./zp_data")),
            auth_url=environ.get("ZOHO_AUTH_URL", DEFAULT_AUTH_URL),
            token_url=environ.get("ZOHO_TOKEN_URL", DEFAULT_TOKEN_URL),
        )

    def credentials(self) -> Credentials:
        return Credentials(
            client_id=self.client_id,
            client_secret=self.client_secret,
            auth_url=self.auth_url,
            token_url=self.token_url,
        )
