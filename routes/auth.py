# routes/auth.py
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException, Request, Response
from jose import JWTError, jwt
import logging

from .dependencies import get_tokens

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

COOKIE_NAME = "token"
TOKEN_LIFETIME = timedelta(hours=1)

# Payloads are caller-defined; only the signature and our own expiry are checked.
DECODE_OPTIONS = {
    "verify_aud": False,
    "verify_iat": False,
    "verify_nbf": False,
    "verify_iss": False,
    "verify_sub": False,
    "verify_jti": False,
    "verify_at_hash": False,
}


class InvalidToken(Exception):
    pass


class TokenService:
    def __init__(self, secret: str, lifetime: timedelta = TOKEN_LIFETIME, algorithm: str = "HS256"):
        self.secret = secret
        self.lifetime = lifetime
        self.algorithm = algorithm

    def issue(self, payload: Dict[str, Any]) -> str:
        claims = dict(payload)
        claims["exp"] = datetime.now(timezone.utc) + self.lifetime
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm], options=DECODE_OPTIONS)
        except JWTError as e:
            raise InvalidToken(str(e)) from e
        claims.pop("exp", None)
        return claims


def set_token_cookie(response: Response, token: str, max_age: int):
    response.set_cookie(
        COOKIE_NAME,
        token,
        max_age=max_age,
        httponly=True,
        secure=True,
        samesite="none",
    )


async def get_current_user(request: Request, tokens: TokenService = Depends(get_tokens)):
    token = request.cookies.get(COOKIE_NAME)
    if not token:
        logger.warning(f"No token cookie on {request.method} {request.url.path}")
        raise HTTPException(status_code=401, detail="Unauthorized Access")
    try:
        user = tokens.verify(token)
    except InvalidToken as e:
        logger.warning(f"Rejected token on {request.url.path}: {str(e)}")
        raise HTTPException(status_code=403, detail="Forbidden Access")
    request.state.user = user
    return user


@router.post("/jwt")
async def issue_token(response: Response, payload: Dict[str, Any] = Body(...), tokens: TokenService = Depends(get_tokens)):
    token = tokens.issue(payload)
    set_token_cookie(response, token, int(tokens.lifetime.total_seconds()))
    logger.info(f"Issued token for {payload.get('email')}")
    return {"success": True}


@router.post("/logout")
async def logout(response: Response, body: Any = Body(None)):
    response.delete_cookie(COOKIE_NAME, httponly=True, secure=True, samesite="none")
    logger.info("Cleared token cookie")
    return body
