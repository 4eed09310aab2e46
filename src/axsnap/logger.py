# logger.py
import json
import logging
import logging.config
from pathlib import Path

import yaml


DEFAULT_LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console_handler": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "stream": "ext://sys.stderr",
        },
    },
    "loggers": {
        "axsnap": {"level": "INFO", "handlers": ["console_handler"], "propagate": False},
    },
    "root": {"level": "WARNING", "handlers": ["console_handler"]},
}


def _load_logging_config(path):
    if path is None:
        return json.loads(json.dumps(DEFAULT_LOGGING_CONFIG))
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in {".yaml", ".yml"}:
        return yaml.safe_load(text) or {}
    return json.loads(text)


def setup_logging(
    config_file_path=None,
    log_file_path=None,
    verbose=False,
):
    """
    Loads logging config from 'config_file_path' (YAML or JSON), or the built-in
    default, and sets up logging.
    Optionally override file handler's filename, and lower the axsnap loggers to DEBUG if 'verbose'.
    """
    config = _load_logging_config(config_file_path)

    # A custom log path overrides the file handler, adding one to the default config if needed
    if log_file_path:
        handlers = config.setdefault("handlers", {})
        if "file_handler" not in handlers:
            handlers["file_handler"] = {"class": "logging.FileHandler"}
            if "standard" in config.get("formatters", {}):
                handlers["file_handler"]["formatter"] = "standard"
            for logger_cfg in config.get("loggers", {}).values():
                logger_cfg.setdefault("handlers", []).append("file_handler")
        handlers["file_handler"]["filename"] = str(log_file_path)

    logging.config.dictConfig(config)

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.getLogger("axsnap").setLevel(logging.DEBUG)

    return logging.getLogger("axsnap")
