import logging.config
import sys


def configure_logging(level: str = "INFO", log_file: str = "gridlogic_errors.log"):
    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,

        # Formatters: How the logs look
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S"
            },
        },

        # Handlers: Where the logs go
        "handlers": {
            "console": {
                "level": level,
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "stream": sys.stdout,
            },
            "file": {
                "level": "ERROR",
                "class": "logging.handlers.RotatingFileHandler",
                "formatter": "standard",
                "filename": log_file,
                "maxBytes": 10485760,  # 10MB
                "backupCount": 5,
                "delay": True,  # no file until the first error
            },
        },

        # Loggers: The configuration for specific modules
        "loggers": {
            "": {  # root logger
                "handlers": ["console", "file"],
                "level": "WARNING",
                "propagate": True
            },
            "gridlogic": {  # handled by the root handlers
                "level": level,
                "propagate": True
            },
            "sqlalchemy.engine": {
                "handlers": ["console"],
                "level": "WARNING",  # INFO shows SQL queries
                "propagate": False
            },
        }
    }

    logging.config.dictConfig(logging_config)
