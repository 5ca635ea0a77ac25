"""
Audit trail for the diff service.

One JSON line per request on the "diff_api.audit" logger. Baseline and
candidate outputs never reach the log: the body is reduced to a short
SHA-256 fingerprint, and string fields pass through redaction.

    app.add_middleware(AuditLoggingMiddleware, enable_redaction=True)
"""

import json
import hashlib
import time
import logging
import re
from uuid import uuid4
from typing import Optional, Dict, Any
from datetime import datetime, timezone

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response


class AuditLogger:
    """Builds, redacts and writes audit entries."""

    # label -> pattern; matches become [REDACTED_<LABEL>]
    REDACTION_PATTERNS = {
        "email": r"[\w\.-]+@[\w\.-]+\.\w+",
        "ssn": r"\d{3}-\d{2}-\d{4}",
        "credit_card": r"\d{4}[\s-]?\d{4}[\s-]?\d{4}[\s-]?\d{4}",
        "token": r"(token|authorization|password)[:\s=\"]+[^\s,}]+",
    }

    def __init__(self, name: str = "diff_api.audit", enable_redaction: bool = True):
        self.logger = logging.getLogger(name)
        self.enable_redaction = enable_redaction

    @staticmethod
    def hash_payload(payload: bytes) -> str:
        if not payload:
            return "sha256:empty"
        return f"sha256:{hashlib.sha256(payload).hexdigest()[:16]}"

    def redact(self, text: str) -> str:
        if not self.enable_redaction:
            return text
        for label, pattern in self.REDACTION_PATTERNS.items():
            text = re.sub(pattern, f"[REDACTED_{label.upper()}]", text, flags=re.IGNORECASE)
        return text

    def create_audit_entry(self, request_id: str, endpoint: str, http_method: str, http_status: int,
                           latency_ms: float, payload_hash: str,
                           error_code: Optional[str] = None) -> Dict[str, Any]:
        return {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "request_id": request_id,
            "endpoint": endpoint,
            "http_method": http_method,
            "http_status": http_status,
            "latency_ms": round(latency_ms, 3),
            "payload_hash": payload_hash,
            "error_code": error_code,
        }

    def log_entry(self, entry: Dict[str, Any]):
        """Redact string values and write the entry as one JSON line."""
        self.logger.info(json.dumps({k: self.redact(v) if isinstance(v, str) else v for k, v in entry.items()}))


def error_code_for(status_code: int) -> Optional[str]:
    if status_code < 400:
        return None
    if status_code == 422:
        return "VALIDATION_ERROR"
    if status_code == 413:
        return "PAYLOAD_TOO_LARGE"
    if status_code >= 500:
        return "SERVER_ERROR"
    return "CLIENT_ERROR"


class AuditLoggingMiddleware(BaseHTTPMiddleware):
    """Write one audit entry per request, including requests that raise."""

    def __init__(self, app, enable_redaction: bool = True):
        super().__init__(app)
        self.audit_logger = AuditLogger(enable_redaction=enable_redaction)

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid4())
        payload_hash = self.audit_logger.hash_payload(await request.body())
        started = time.perf_counter()

        def write(http_status: int, error_code: Optional[str]) -> None:
            self.audit_logger.log_entry(self.audit_logger.create_audit_entry(
                request_id=request_id,
                endpoint=request.url.path,
                http_method=request.method,
                http_status=http_status,
                latency_ms=(time.perf_counter() - started) * 1000,
                payload_hash=payload_hash,
                error_code=error_code,
            ))

        try:
            response = await call_next(request)
        except Exception:
            write(500, "INTERNAL_ERROR")
            raise

        write(response.status_code, error_code_for(response.status_code))
        response.headers.setdefault("X-Request-ID", request_id)
        return response
