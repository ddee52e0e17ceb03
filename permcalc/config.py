import logging
import os

import attr
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

TRUTHY = frozenset(("1", "true", "yes", "on"))


@attr.define(frozen=True)
class Settings:
    continue_on_missing_items: bool = attr.field(default=False)
    log_level: str = attr.field(default="INFO")


def load_settings() -> Settings:
    load_dotenv()

    raw_continue = os.getenv("PERMCALC_CONTINUE_ON_MISSING_ITEMS")
    raw_log_level = os.getenv("PERMCALC_LOG_LEVEL")
    return Settings(
        continue_on_missing_items=(
            raw_continue is not None and raw_continue.strip().lower() in TRUTHY
        ),
        log_level=parse_log_level(raw_log_level),
    )


def parse_log_level(raw: str | None) -> str:
    if not raw:
        return "INFO"
    level = raw.strip().upper()
    # getLevelName maps known names to their numeric level
    if not isinstance(logging.getLevelName(level), int):
        logger.warning(f"unknown log level {raw!r}, using INFO")
        return "INFO"
    return level


def setup_logs(settings: Settings) -> None:
    levels = {"permcalc": parse_log_level(settings.log_level)}
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)
