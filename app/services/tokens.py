import hmac
import uuid
from typing import Optional
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired
from flask import current_app
from werkzeug.security import check_password_hash

GATE_KIND = "gate"

def _serializer() -> URLSafeTimedSerializer:
    secret = current_app.config["SECRET_KEY"]
    salt = current_app.config.get("GATE_TOKEN_SALT", "gate-token-v1")
    return URLSafeTimedSerializer(secret_key=secret, salt=salt)

def generate(kind: str, identity: str) -> str:
    """
    kind: token purpose ('gate'); a token minted for one kind never verifies as another.
    identity: opaque session id.
    """
    return _serializer().dumps({"k": kind, "i": identity})

def verify(kind: str, token: str, max_age_seconds: int) -> Optional[str]:
    if not token:
        return None
    try:
        data = _serializer().loads(token, max_age=max_age_seconds)
    except (BadSignature, SignatureExpired):
        return None
    if not isinstance(data, dict) or data.get("k") != kind:
        return None
    return data.get("i")

def issue_gate_session() -> tuple[str, str]:
    """Returns (session_id, token) for a freshly unlocked browser."""
    sid = uuid.uuid4().hex
    return sid, generate(GATE_KIND, sid)

def verify_gate_session(token: str) -> Optional[str]:
    ttl = int(current_app.config.get("GATE_SESSION_TTL_SECONDS") or 0)
    return verify(GATE_KIND, token, max_age_seconds=ttl)

def check_gate_password(candidate: str) -> bool:
    """Hash wins when configured; the plaintext setting is a dev convenience."""
    if not candidate:
        return False
    hashed = current_app.config.get("GATE_PASSWORD_HASH")
    if hashed:
        return check_password_hash(hashed, candidate)
    plain = current_app.config.get("GATE_PASSWORD")
    if not plain:
        return False
    return hmac.compare_digest(plain.encode("utf-8"), candidate.encode("utf-8"))
