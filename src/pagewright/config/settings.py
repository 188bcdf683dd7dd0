from __future__ import annotations

import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    timeout: float = float(os.getenv("PAGEWRIGHT_TIMEOUT", "10"))
    poll_interval: float = float(os.getenv("PAGEWRIGHT_POLL_INTERVAL", "0.5"))
    framework_idle: bool = _env_bool("PAGEWRIGHT_FRAMEWORK_IDLE", True)
    headless: bool = _env_bool("HEADLESS", True)
    browser: str = os.getenv("BROWSER", "chromium")  # chromium|firefox|webkit
    capture_url: str | None = os.getenv("CAPTURE_URL")
    sut_name: str | None = os.getenv("SUT_NAME")
    sut_version: str | None = os.getenv("SUT_VERSION")
    capture_pool_size: int = int(os.getenv("CAPTURE_POOL_SIZE", "4"))
    capture_drain_timeout: float = float(os.getenv("CAPTURE_DRAIN_TIMEOUT", "120"))

    @property
    def capture_required(self) -> bool:
        return bool(self.capture_url and self.sut_name and self.sut_version)


settings = Settings()
