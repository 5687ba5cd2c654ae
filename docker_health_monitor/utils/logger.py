"""Structured JSON logging configuration."""

import logging
import sys
from pythonjsonlogger import jsonlogger

SERVICE_NAME = "docker-health-monitor"

# Chatty transport loggers of the Docker SDK
_QUIET_LOGGERS = ("docker", "urllib3")


class ServiceJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter tagging every record with the service name."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record.setdefault("service", SERVICE_NAME)


def setup_logger(name: str = "docker_health_monitor", level: str = "INFO") -> logging.Logger:
    """
    Configure a JSON logger writing to stderr.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    logger.handlers = []

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ServiceJsonFormatter(
        '%(asctime)s %(name)s %(levelname)s %(message)s',
        rename_fields={"levelname": "level", "name": "logger"},
        timestamp=True
    ))
    logger.addHandler(handler)
    logger.propagate = False

    if level.upper() != "DEBUG":
        for quiet in _QUIET_LOGGERS:
            logging.getLogger(quiet).setLevel(logging.WARNING)

    return logger
