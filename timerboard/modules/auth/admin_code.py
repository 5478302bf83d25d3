"""
One-time admin code used to bootstrap the first admin.

When no admin exists at startup a code is generated and a login link is
logged; the first login carrying the code within its TTL is granted admin.
A code is invalidated by its first successful use or by expiring.
"""

import logging
import secrets
import string
import threading
import time
from typing import Optional

from timerboard.config import settings

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_letters + string.digits
CODE_LENGTH = 32


class AdminCodeService:
    def __init__(self, ttl_seconds: int = 60):
        self.ttl_seconds = ttl_seconds
        self._lock = threading.Lock()
        self._code: Optional[str] = None
        self._expires_at = 0.0

    def generate(self) -> str:
        """Replace any outstanding code with a fresh one"""
        code = "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))
        with self._lock:
            self._code = code
            self._expires_at = time.monotonic() + self.ttl_seconds
        return code

    def validate_and_consume(self, input_code: str) -> bool:
        with self._lock:
            if self._code is None:
                return False
            if time.monotonic() >= self._expires_at:
                self._code = None
                return False
            if not secrets.compare_digest(self._code, input_code):
                return False
            self._code = None
            return True


admin_code_service = AdminCodeService(settings.admin_code_ttl_seconds)


def get_admin_code_service() -> AdminCodeService:
    return admin_code_service
