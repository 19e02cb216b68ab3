from datetime import datetime
from pydantic import BaseModel

class LoginRequest(BaseModel):
    # Optional so a missing password gets the login route's own 400 message
    password: str | None = None

class LoginResponse(BaseModel):
    token: str
    expiresAt: datetime
