import json
import logging
from datetime import datetime, timezone


def get_logger(name: str, level: str = "INFO") -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger


def log_action(
    logger: logging.Logger,
    module: str,
    action: str,
    section: str | None,
    trace_id: str | None,
    outcome: str,
    **extra: object,
) -> None:
    level = logging.INFO if outcome in {"success", "ignored"} else logging.WARNING
    logger.log(
        level,
        json.dumps(
            {
                "ts": datetime.now(timezone.utc).isoformat(),
                "level": logging.getLevelName(level),
                "module": module,
                "action": action,
                "section": section,
                "trace_id": trace_id,
                "outcome": outcome,
                **extra,
            },
            default=str,
        ),
    )
