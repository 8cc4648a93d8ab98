import logging
import os
from logging.config import dictConfig


LOGGER_NAME = "movie_discovery"
LOG_FORMAT = "%(levelprefix)s | %(asctime)s | %(name)s | %(message)s"
# third-party loggers that share the service handler
QUIET_LOGGERS = ("aiocache", "urllib3")


def get_log_level() -> str:
    """LOG_LEVEL wins over the DEBUG switch, INFO otherwise."""
    level = os.environ.get("LOG_LEVEL")
    if level:
        return level.upper()
    return "DEBUG" if os.environ.get("DEBUG") else "INFO"


def create_log_config(log_level: str) -> dict:
    loggers = {LOGGER_NAME: {"handlers": ["default"], "level": log_level, "propagate": False}}
    for name in QUIET_LOGGERS:
        loggers[name] = {"handlers": ["default"], "level": "WARNING", "propagate": False}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "()": "uvicorn.logging.DefaultFormatter",
                "fmt": LOG_FORMAT,
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "default": {
                "formatter": "default",
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": loggers,
    }


dictConfig(create_log_config(get_log_level()))
logger = logging.getLogger(LOGGER_NAME)
