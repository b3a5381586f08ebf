"""Firebase authentication middleware: session cookie or bearer ID token"""

import logging
import re

from fastapi import Request
from firebase_admin import auth
from firebase_admin.auth import (
    ExpiredIdTokenError,
    ExpiredSessionCookieError,
    InvalidIdTokenError,
    InvalidSessionCookieError,
    RevokedIdTokenError,
    RevokedSessionCookieError,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from app.models.user import User, UserCreate
from app.services.user_service import UserService


logger = logging.getLogger(__name__)

# (method, path pattern) pairs reachable without authentication. Certificate
# lookup and verification are public so third parties can check a credential.
PUBLIC_ROUTES = [
    ("GET", r"^/api/v1/health$"),
    ("GET", r"^/api/v1/certificates/(?!my-certificates$)[^/]+$"),
    ("POST", r"^/api/v1/certificates/verify$"),
    ("GET", r"^/docs$"),
    ("GET", r"^/openapi\.json$"),
    ("GET", r"^/redoc$"),
]

_TOKEN_ERRORS = {
    ExpiredSessionCookieError: ("Session expired", "SESSION_EXPIRED"),
    RevokedSessionCookieError: ("Session revoked", "SESSION_REVOKED"),
    InvalidSessionCookieError: ("Invalid session", "SESSION_INVALID"),
    ExpiredIdTokenError: ("ID token expired", "TOKEN_EXPIRED"),
    RevokedIdTokenError: ("ID token revoked", "TOKEN_REVOKED"),
    InvalidIdTokenError: ("Invalid ID token", "TOKEN_INVALID"),
}


def is_public_route(method: str, path: str) -> bool:
    return any(
        method == route_method and re.match(pattern, path)
        for route_method, pattern in PUBLIC_ROUTES
    )


class FirebaseSessionMiddleware(BaseHTTPMiddleware):
    COOKIE_NAME = "session"

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS" or is_public_route(request.method, request.url.path):
            return await call_next(request)

        session_cookie = request.cookies.get(self.COOKIE_NAME)
        auth_header = request.headers.get("authorization", "")
        id_token = auth_header[len("Bearer "):] if auth_header.startswith("Bearer ") else None

        if not session_cookie and not id_token:
            return JSONResponse(
                status_code=401,
                content={
                    "detail": "Missing authentication token. Provide either a session cookie or Authorization header with Bearer token",
                    "error_code": "AUTH_MISSING",
                },
            )

        try:
            if session_cookie:
                decoded_claims = auth.verify_session_cookie(session_cookie, check_revoked=True)
            else:
                decoded_claims = auth.verify_id_token(id_token, check_revoked=True)

            user_service = UserService(request.app.state.db)
            user: User = user_service.get_or_create_user(
                UserCreate(
                    firebase_uid=decoded_claims["uid"],
                    email=decoded_claims.get("email"),
                    name=decoded_claims.get("name") or decoded_claims.get("email"),
                    picture=decoded_claims.get("picture"),
                )
            )
        except tuple(_TOKEN_ERRORS) as token_error:
            detail, error_code = next(
                value for error_type, value in _TOKEN_ERRORS.items()
                if isinstance(token_error, error_type)
            )
            return JSONResponse(
                status_code=401, content={"detail": detail, "error_code": error_code}
            )
        except Exception:
            logger.exception("Failed to authenticate request")
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal server error", "error_code": "INTERNAL_ERROR"},
            )

        request.state.current_user = user
        return await call_next(request)
