from flask import session
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_wtf import CSRFProtect
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

db = SQLAlchemy()
migrate = Migrate()
csrf = CSRFProtect()

# Key: gate session id once past the password gate; otherwise client IP
def _rate_limit_key():
    sid = session.get("gate_sid")  # policy.GATE_SID_KEY
    if sid:
        return f"gate:{sid}"
    return get_remote_address()

# Storage is configured in create_app() via limiter.init_app(...).
limiter = Limiter(key_func=_rate_limit_key)
