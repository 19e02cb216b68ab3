import logging
from fastapi import APIRouter, Depends, HTTPException, status
from kempoverse.schemas.auth import LoginRequest, LoginResponse
from kempoverse.schemas.envelope import Envelope
from kempoverse.security import TokenCodec, verify_password
from kempoverse.settings import Settings, get_settings
from kempoverse.deps.auth import get_token_codec

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

@router.post("/login", response_model=Envelope[LoginResponse])
def login(
    payload: LoginRequest,
    settings: Settings = Depends(get_settings),
    codec: TokenCodec = Depends(get_token_codec),
):
    if not payload.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Password is required")
    if not verify_password(payload.password, settings.AUTH_PASSWORD):
        log.warning("rejected login attempt")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid password")
    token, expires_at = codec.issue()
    return {"data": {"token": token, "expiresAt": expires_at}}
