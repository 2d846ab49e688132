"""
WS-Security UsernameToken PasswordDigest generation.
"""

import base64
import hashlib
import uuid
from datetime import datetime, timezone
from typing import Optional

from .interfaces import DigestToken


def created_timestamp(now: Optional[datetime] = None) -> str:
    """UTC time as RFC3339 with millisecond precision and a literal Z."""
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return now.strftime('%Y-%m-%dT%H:%M:%S') + '.%03dZ' % (now.microsecond // 1000)


def compute_digest(nonce: bytes, created: str, password: str) -> str:
    """Return base64(SHA1(nonce + created + password))."""
    sha1 = hashlib.sha1()
    sha1.update(nonce)
    sha1.update(created.encode('utf-8'))
    sha1.update(password.encode('utf-8'))
    return base64.b64encode(sha1.digest()).decode('ascii')


def generate_token(password: str, nonce: Optional[bytes] = None,
                   created: Optional[str] = None) -> DigestToken:
    """
    Build a fresh DigestToken. `nonce` and `created` are only passed in by
    tests; normal callers get a random nonce and the current time.
    """
    if nonce is None:
        nonce = uuid.uuid4().bytes
    if created is None:
        created = created_timestamp()
    return DigestToken(
        digest=compute_digest(nonce, created, password),
        nonce=base64.b64encode(nonce).decode('ascii'),
        created=created,
    )
