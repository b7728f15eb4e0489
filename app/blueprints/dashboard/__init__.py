from flask import Blueprint

from app.services.policy import enforce_gate

bp = Blueprint("dashboard", __name__)

# Every page behind the password gate
bp.before_request(enforce_gate)

from . import routes  # noqa: E402,F401 (import after bp to avoid circulars)
