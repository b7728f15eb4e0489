from flask import Blueprint

from app.services.policy import enforce_gate

bp = Blueprint("exports", __name__)
bp.before_request(enforce_gate)

from . import routes  # noqa: E402,F401
