from flask import redirect, url_for

from app.services.policy import gate_session_id
from . import bp

@bp.get("/")
def home():
    if gate_session_id():
        return redirect(url_for("dashboard.index"))
    return redirect(url_for("auth.login_get"))
