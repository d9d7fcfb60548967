import atexit
import json
import logging
import logging.handlers
import os
import queue
import re
from typing import Optional

import requests

from workforce_risk.config.settings import Settings

# =========================
# Datadog Configuration
# =========================

# ONLY exclude very noisy internals
EXCLUDED_LOGGERS = {
    "httpcore",    # low-level HTTP noise
    "hpack",
    "anthropic._base_client",
}

# Optional allowlist (comma-separated logger prefixes)
# Example: DD_INCLUDE_LOGGERS=workforce_risk,uvicorn.access
INCLUDE_LOGGERS = (
    os.getenv("DD_INCLUDE_LOGGERS").split(",")
    if os.getenv("DD_INCLUDE_LOGGERS")
    else None
)

# Structured fields copied from ``extra=`` onto the payload
STRUCTURED_FIELDS = (
    "http.method",
    "http.url",
    "http.status_code",
    "http.client_ip",
    "http.request_id",
    "duration_ms",
    "event_type",
    "subject",
    "company_id",
    "tool_name",
)


# =========================
# Datadog Logging Handler
# =========================

class DatadogLogger(logging.Handler):
    def __init__(self, service: str, api_key: Optional[str], url: str, env: str = "development"):
        super().__init__()
        self.service = service
        self.api_key = api_key
        self.url = url
        self.env = env

        # Uvicorn already formats access logs
        self.setFormatter(logging.Formatter("%(message)s"))

        # Format: "IP:PORT - "METHOD PATH HTTP_VERSION" STATUS_CODE"
        self.access_log_pattern = re.compile(
            r'(\d+\.\d+\.\d+\.\d+):(\d+)\s+-\s+"(\w+)\s+([^\s?]+)(?:\?[^"]*)?\s+HTTP/[^"]+"\s+(\d+)'
        )

    def parse_access_log(self, message: str) -> dict:
        """
        Parse uvicorn access log to extract structured fields.
        Returns dict with http.method, http.url, http.status_code, etc.
        """
        match = self.access_log_pattern.match(message)
        if not match:
            return {}

        client_ip, client_port, method, path, status_code = match.groups()

        return {
            "http.method": method,
            "http.url": path,
            "http.status_code": int(status_code),
            "http.client_ip": client_ip,
            "http.client_port": int(client_port),
        }

    def should_log(self, record: logging.LogRecord) -> bool:
        """
        Decide whether to send this log to Datadog.
        """
        logger_name = record.name

        if INCLUDE_LOGGERS:
            return any(
                logger_name.startswith(prefix.strip())
                for prefix in INCLUDE_LOGGERS
                if prefix.strip()
            )

        for excluded in EXCLUDED_LOGGERS:
            if logger_name.startswith(excluded):
                return False

        return True

    def build_payload(self, record: logging.LogRecord) -> dict:
        message = record.getMessage()
        payload = {
            "message": message,
            "ddsource": "python",
            "service": self.service,
            "hostname": os.getenv("HOSTNAME"),
            "status": record.levelname.lower(),
            "logger": record.name,
        }
        tags = [f"env:{self.env}", f"service:{self.service}"]

        for attr in STRUCTURED_FIELDS:
            value = getattr(record, attr, None)
            if value is not None:
                payload[attr] = value

        if record.name == "uvicorn.access":
            payload.update(self.parse_access_log(message))

        if payload.get("http.method"):
            tags.append(f"http.method:{str(payload['http.method']).lower()}")
        if payload.get("http.status_code"):
            tags.append(f"http.status_code:{payload['http.status_code']}")
        if payload.get("event_type"):
            tags.append(f"event_type:{payload['event_type']}")

        payload["ddtags"] = ",".join(tags)
        return payload

    def emit(self, record: logging.LogRecord):
        if not self.api_key:
            return

        try:
            if not self.should_log(record):
                return

            requests.post(
                self.url,
                headers={
                    "Content-Type": "application/json",
                    "DD-API-KEY": self.api_key,
                },
                data=json.dumps(self.build_payload(record), default=str),
                timeout=2,
            )
        except Exception:
            # Never break the app because of logging
            self.handleError(record)


# =========================
# Background Shipping
# =========================

class DatadogQueueHandler(logging.handlers.QueueHandler):
    """
    Queues records for a listener thread that ships them with DatadogLogger,
    so request handlers never wait on the intake.
    """

    def __init__(self, datadog_handler: DatadogLogger):
        super().__init__(queue.SimpleQueue())
        self.datadog_handler = datadog_handler
        self.listener = logging.handlers.QueueListener(
            self.queue, datadog_handler, respect_handler_level=True
        )
        self.listener.start()
        self._running = True
        atexit.register(self.stop)

    def stop(self):
        """Flush queued records and stop the listener thread."""
        if self._running:
            self._running = False
            self.listener.stop()

    def close(self):
        self.stop()
        super().close()


def configure_logging(settings: Settings) -> logging.Logger:
    """
    Configure the root logger for the service.

    Sets level and format from settings and attaches the Datadog handler
    behind a queue.
    Safe to call more than once; handlers are not duplicated.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(settings.log_level.upper())

    if not any(isinstance(h, logging.StreamHandler)
               for h in root_logger.handlers):
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(logging.Formatter(settings.log_format))
        root_logger.addHandler(stream_handler)

    if not any(isinstance(h, DatadogQueueHandler) for h in root_logger.handlers):
        dd_handler = DatadogLogger(
            service=settings.service_name,
            api_key=settings.datadog_api_key,
            url=settings.datadog_log_url,
            env=settings.environment,
        )
        dd_handler.setLevel(logging.INFO)
        queue_handler = DatadogQueueHandler(dd_handler)
        queue_handler.setLevel(logging.INFO)
        root_logger.addHandler(queue_handler)

    # Ensure uvicorn.access logs propagate to root logger (no direct handler)
    uvicorn_access_logger = logging.getLogger("uvicorn.access")
    uvicorn_access_logger.setLevel(logging.INFO)
    uvicorn_access_logger.propagate = True

    return root_logger
