import logging

from .. import config

__all__ = ["configure_logging"]


def configure_logging(level_name: str | None = None) -> None:
    name = (level_name or config.get_log_level()).upper()
    level = getattr(logging, name, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    logging.getLogger("minder").setLevel(level)
