from flask import Blueprint

from app.extensions import csrf
from app.services.policy import enforce_gate

bp = Blueprint("api", __name__)

# JSON clients carry the gate token cookie instead of a CSRF form field
csrf.exempt(bp)
bp.before_request(enforce_gate)

from . import routes  # noqa: E402,F401
