import logging
import os

logger = logging.getLogger(__name__)

_DEFAULT_API_BASE = "https://developer-lostark.game.onstove.com"


class Core:
    def __init__(self, config: dict | None = None) -> None:
        cfg = (config or {}).get("loaboard", {})
        discord_cfg = cfg.get("discord", {})
        lostark_cfg = cfg.get("lostark", {})
        http_cfg = cfg.get("http", {})

        token_env = str(discord_cfg.get("token_env", "DISCORD_API_TOKEN"))
        api_key_env = str(lostark_cfg.get("api_key_env", "LOSTARK_API_KEY"))

        self.DISCORD_API_TOKEN: str | None = os.getenv(token_env)
        self.LOSTARK_API_KEY: str | None = os.getenv(api_key_env)

        self.GUILD_ID: int = int(discord_cfg.get("guild_id") or os.getenv("GUILD_ID", "0"))
        self.LOSTARK_API_BASE: str = str(lostark_cfg.get("base_url", os.getenv("LOSTARK_API_BASE", _DEFAULT_API_BASE)))

        # Liveness endpoint; 0 disables it
        self.PORT: int = int(http_cfg.get("port", os.getenv("PORT", "8080")))
        self.HTTP_TIMEOUT: float = float(http_cfg.get("timeout", os.getenv("HTTP_TIMEOUT", "15")))

        required = [
            ("DISCORD_API_TOKEN", self.DISCORD_API_TOKEN),
            ("LOSTARK_API_KEY", self.LOSTARK_API_KEY),
            ("GUILD_ID", self.GUILD_ID),
        ]
        missing = [name for name, val in required if not val]
        if missing:
            raise ValueError(f"Missing environment variables: {', '.join(missing)}")
