import os


class Core:
    def __init__(self, config: dict | None = None) -> None:
        cfg = (config or {}).get("cloak", {})
        discord_cfg = cfg.get("discord", {})

        token_env = str(discord_cfg.get("token_env", "DISCORD_TOKEN"))

        self.DISCORD_TOKEN: str | None = os.getenv(token_env)
        self.LOG_LEVEL: str = str(cfg.get("log_level", os.getenv("LOG_LEVEL", "INFO"))).upper()
        self.SYNC_COMMANDS: bool = str(
            discord_cfg.get("sync_commands", os.getenv("SYNC_COMMANDS", "1"))
        ).lower() in ("1", "true", "yes")

        required = [
            (token_env, self.DISCORD_TOKEN),
        ]
        missing = [name for name, val in required if not val]
        if missing:
            raise ValueError(f"Missing environment variables: {', '.join(missing)}")
