"""dictConfig 기반 애플리케이션/감사(audit) 로깅 설정입니다."""

import logging.config
import os
import sys

from cms.config import settings


def build_logging_config(level: str, log_dir: str = "") -> dict:
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "stream": sys.stdout,
            "formatter": "console",
            "level": "DEBUG",
        },
        "audit_console": {
            "class": "logging.StreamHandler",
            "stream": sys.stdout,
            "formatter": "audit",
            "level": "INFO",
        },
    }
    root_handlers = ["console"]
    audit_handlers = ["audit_console"]

    if log_dir:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": os.path.join(log_dir, "app.log"),
            "formatter": "file",
            "level": "INFO",
            "maxBytes": 5 * 1024 * 1024,  # 5MB
            "backupCount": 5,
            "encoding": "utf-8",
        }
        handlers["audit_file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": os.path.join(log_dir, "audit.log"),
            "formatter": "audit",
            "level": "INFO",
            "maxBytes": 5 * 1024 * 1024,
            "backupCount": 3,
            "encoding": "utf-8",
        }
        root_handlers.append("file")
        audit_handlers = ["audit_file"]

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "format": "[%(asctime)s] %(levelname)s | %(name)s | %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "file": {
                "format": (
                    "%(asctime)s | %(levelname)s | %(process)d | %(threadName)s | "
                    "%(name)s | %(message)s"
                ),
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "audit": {
                "format": "%(asctime)s | AUDIT | %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": handlers,
        "loggers": {
            "": {
                "handlers": root_handlers,
                "level": level.upper(),
                "propagate": False,
            },
            # 버전 복원/게시/초안 등 편집 이력은 audit 로거로만 남긴다.
            "audit": {
                "handlers": audit_handlers,
                "level": "INFO",
                "propagate": False,
            },
        },
    }


def init_logging():
    if settings.LOG_DIR:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
    logging.config.dictConfig(build_logging_config(settings.LOG_LEVEL, settings.LOG_DIR))
    logging.getLogger(__name__).info("Logging initialized")
