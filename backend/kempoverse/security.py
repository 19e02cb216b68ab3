import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from jose import jwk
from jose.constants import ALGORITHMS
from jose.exceptions import JWKError
from kempoverse.settings import Settings, get_settings

Clock = Callable[[], datetime]

# epoch-ms stays at 13 digits until the year 2286
MAX_EXPIRY_DIGITS = 15

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

def to_epoch_ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)

class TokenCodec:
    """
    Stateless bearer tokens of the form "<expiry-epoch-ms>:<hex signature>".

    The signature is HMAC-SHA256 over the expiry string, keyed with the shared
    secret. Nothing is stored server-side: rotating the secret invalidates every
    outstanding token, and logging out is just the client dropping it.
    """

    def __init__(self, secret: str, *, ttl: timedelta = timedelta(hours=24), clock: Clock = utc_now):
        try:
            self._key = jwk.construct(secret, algorithm=ALGORITHMS.HS256)
        except JWKError as e:
            raise ValueError(f"unusable token secret: {e}") from e
        self.ttl = ttl
        self.clock = clock

    def _sign(self, expiry: str) -> str:
        return self._key.sign(expiry.encode("ascii")).hex()

    def issue(self) -> tuple[str, datetime]:
        """Return (token, expires_at)."""
        expires_at = self.clock() + self.ttl
        expiry = str(to_epoch_ms(expires_at))
        return f"{expiry}:{self._sign(expiry)}", expires_at

    def validate(self, token: Optional[str]) -> bool:
        """False for malformed, expired or mis-signed tokens; never raises."""
        if not token or not isinstance(token, str):
            return False
        parts = token.split(":")
        if len(parts) != 2:
            return False
        expiry, signature = parts
        if not (expiry.isascii() and expiry.isdigit()) or not signature:
            return False
        if len(expiry) > MAX_EXPIRY_DIGITS:
            return False
        if to_epoch_ms(self.clock()) > int(expiry):
            return False
        return secrets.compare_digest(signature, self._sign(expiry))

def codec_from_settings(s: Settings | None = None) -> TokenCodec:
    s = s or get_settings()
    return TokenCodec(s.AUTH_SECRET, ttl=timedelta(hours=s.TOKEN_TTL_HOURS))

def verify_password(candidate: str, expected: str) -> bool:
    return secrets.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))
