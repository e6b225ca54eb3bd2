from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from pydantic import BaseModel
from jose import jwt, JWTError

from core.config import (
    ADMIN_USERNAME,
    JWT_SECRET,
    JWT_ALGORITHM,
    JWT_EXPIRE_MINUTES,
)
from core.logging import logger
from core.security import verify_credentials

router = APIRouter(prefix="/api/admin", tags=["admin"])

# pulls the Bearer token out of the Authorization header
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/admin/login")


# login request body
class LoginRequest(BaseModel):
    username: str
    password: str


# login response (token)
class TokenResponse(BaseModel):
    success: bool = True
    access_token: str
    token_type: str = "bearer"


class AdminUser(BaseModel):
    username: str


def create_access_token(username: str) -> str:
    """JWT access_token carrying the admin username"""
    now = datetime.now(timezone.utc)
    expire = now + timedelta(minutes=JWT_EXPIRE_MINUTES)

    payload = {
        "sub": username,
        "iat": now,
        "exp": expire,
    }

    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


# current admin, used by the protected routes
async def get_current_admin(token: str = Depends(oauth2_scheme)) -> AdminUser:
    credentials_exception = HTTPException(
        status_code=401,
        detail="Authentication failed, please log in again.",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
        sub = payload.get("sub")
    except JWTError:
        raise credentials_exception

    if sub != ADMIN_USERNAME:
        raise credentials_exception

    return AdminUser(username=sub)


@router.post("/login", response_model=TokenResponse)
def login(body: LoginRequest):
    if not verify_credentials(body.username, body.password):
        logger.warning(f"Admin login rejected for '{body.username}'")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return TokenResponse(access_token=create_access_token(body.username))


# token sanity check
@router.get("/me")
async def read_me(current_admin: AdminUser = Depends(get_current_admin)):
    return {"username": current_admin.username}
