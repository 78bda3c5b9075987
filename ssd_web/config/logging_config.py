import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    lvl = logging.getLevelName((level or "INFO").upper())
    if not isinstance(lvl, int):
        raise ValueError(f"Unknown log level: {level!r}")
    logging.basicConfig(level=lvl, format=LOG_FORMAT)
    # urllib3 logs every connection at DEBUG
    logging.getLogger("urllib3").setLevel(max(lvl, logging.WARNING))
