import os


class Board:
    """Refresh engine tuning: timers, rate-limit delays, scan depth and storage."""

    def __init__(self, config: dict | None = None) -> None:
        board_cfg = (config or {}).get("loaboard", {}).get("board", {})

        # Seconds between scheduled ticks
        self.REFRESH_INTERVAL: float = float(board_cfg.get("refresh_interval", os.getenv("REFRESH_INTERVAL", "600")))
        # Provider staleness window; must stay below REFRESH_INTERVAL
        self.CACHE_TTL: float = float(board_cfg.get("cache_ttl", os.getenv("CACHE_TTL", "300")))

        # Pause before each provider call / each message edit during a tick
        self.API_DELAY: float = float(board_cfg.get("api_delay", os.getenv("API_DELAY", "0.3")))
        self.EDIT_DELAY: float = float(board_cfg.get("edit_delay", os.getenv("EDIT_DELAY", "0.5")))

        # Recent messages inspected per channel when looking for marked boards
        self.SCAN_LIMIT: int = int(board_cfg.get("scan_limit", os.getenv("SCAN_LIMIT", "50")))

        self.PERSIST_DIR: str = str(board_cfg.get("persist_dir", os.getenv("PERSIST_DIR", "data")))
        self.TIMEZONE: str = str(board_cfg.get("timezone", os.getenv("BOARD_TIMEZONE", "Asia/Seoul")))

        # Consecutive "message gone" ticks before a target is dropped; 0 keeps it forever
        self.PRUNE_AFTER_FAILURES: int = int(
            board_cfg.get("prune_after_failures", os.getenv("PRUNE_AFTER_FAILURES", "0"))
        )

        if self.CACHE_TTL >= self.REFRESH_INTERVAL:
            raise ValueError(
                f"CACHE_TTL ({self.CACHE_TTL}s) must be shorter than REFRESH_INTERVAL ({self.REFRESH_INTERVAL}s)"
            )
        if self.SCAN_LIMIT <= 0:
            raise ValueError("SCAN_LIMIT must be > 0")
        if self.PRUNE_AFTER_FAILURES < 0:
            raise ValueError("PRUNE_AFTER_FAILURES must be >= 0")
