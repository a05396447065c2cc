import os
from pathlib import Path

_DEFAULT_DB_PATH = Path("data") / "cloak.db"


class Storage:
    def __init__(self, config: dict | None = None) -> None:
        storage_cfg = (config or {}).get("cloak", {}).get("storage", {})
        self.DB_PATH: str = str(storage_cfg.get("db_path", os.getenv("CLOAK_DB_PATH", str(_DEFAULT_DB_PATH))))
        # sqlite busy timeout in milliseconds
        self.BUSY_TIMEOUT_MS: int = int(storage_cfg.get("busy_timeout_ms", os.getenv("CLOAK_BUSY_TIMEOUT_MS", "3000")))
