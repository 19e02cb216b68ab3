# kempoverse/deps/auth.py
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from kempoverse.exceptions import AuthenticationError
from kempoverse.security import TokenCodec, codec_from_settings

# Exposes Bearer auth in Swagger; login endpoint issues the token.
# auto_error=False so a missing header gets our own message instead of FastAPI's.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

def get_token_codec() -> TokenCodec:
    return codec_from_settings()

def require_auth(
    token: str | None = Depends(oauth2_scheme),
    codec: TokenCodec = Depends(get_token_codec),
) -> str:
    """
    Guard for mutating routes: dependencies=[Depends(require_auth)]
    Read-only entry and session routes stay public.
    """
    if not token:
        raise AuthenticationError("Authentication required")
    if not codec.validate(token):
        raise AuthenticationError("Invalid or expired token")
    return token
