from datetime import datetime, timedelta, timezone

from jose import jwt, JWTError

ALGORITHM = "HS256"
TOKEN_LIFETIME = timedelta(hours=1)
COOKIE_NAME = "token"


def issue_token(claims: dict, secret: str, now: datetime = None) -> str:
    """Sign `claims` (id, first_name, email, role) into a token valid for one hour."""
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "id": claims["id"],
        "first_name": claims.get("first_name", ""),
        "email": claims["email"],
        "role": claims.get("role") or "user",
        "iat": issued_at,
        "exp": issued_at + TOKEN_LIFETIME,
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def verify_token(token: str, secret: str):
    """
    Return the token's claims, or None when the token is missing, malformed,
    signed with another secret or expired. Callers treat every None the same.
    """
    if not token:
        return None
    try:
        return jwt.decode(token, secret, algorithms=[ALGORITHM])
    except JWTError:
        return None


def extract_token(cookies, headers):
    """Pick the session token from the `token` cookie, else a Bearer header."""
    token = cookies.get(COOKIE_NAME)
    if token:
        return token
    auth_header = headers.get("authorization") or ""
    scheme, _, value = auth_header.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return None
