"""
=============================================================================
ACCESS LOG
=============================================================================

One line per served request, on the "contentserver.access" logger so it
can be routed separately from diagnostic logs:

    logging.getLogger("contentserver.access").addHandler(file_handler)

Two formats:

    text   127.0.0.1 - - [19/Oct/2026:08:00:00 +0000] "GET / HTTP/1.1" 200 2 0.41ms
    json   {"request_id": "1a2b3c4d", "request_line": "GET / HTTP/1.1", ...}

Connections that fail before a response is written are not access-logged;
the failure itself is logged by the server at WARNING or ERROR.

=============================================================================
"""

import json
import logging
import time
from dataclasses import dataclass, asdict


logger = logging.getLogger("contentserver.access")


@dataclass
class RequestLog:
    """
    Structured log entry for one request/response cycle.

    request_id:     Connection id (matches the diagnostic log lines)
    request_line:   First line of the request, escaped
    client_ip:      Client's IP address
    status_code:    Status code sent
    content_length: Response body size in bytes
    duration_ms:    Time from accept to response sent
    timestamp:      When the response was sent
    """

    request_id: str
    request_line: str
    client_ip: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        entry = asdict(self)
        entry["duration_ms"] = round(self.duration_ms, 2)
        return entry

    def to_text(self) -> str:
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.request_line}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class AccessLogger:
    """Emits RequestLog entries in the configured format."""

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        self.log_format = log_format
        self.log_level = log_level

    def log(
        self,
        request_id: str,
        request_line: str,
        client_ip: str,
        status_code: int,
        content_length: int,
        duration_ms: float,
    ) -> RequestLog:
        entry = RequestLog(
            request_id=request_id,
            request_line=request_line,
            client_ip=client_ip,
            status_code=int(status_code),
            content_length=content_length,
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(entry.to_dict()))
        else:
            logger.log(self.log_level, entry.to_text())

        return entry
