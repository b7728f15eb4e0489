import logging
from flask import render_template, request, redirect, url_for, flash
from app.extensions import limiter
from app.observability import log_event
from app.services import tokens
from app.services.policy import gate_session_id, open_gate, close_gate
from . import bp


# Only allow internal paths like "/dash/" (no external URLs or "//" protocol-relative).
def _safe_next_path(next_raw: str) -> str:
    next_raw = (next_raw or "").strip()
    if next_raw.startswith("/") and not next_raw.startswith("//"):
        return next_raw
    return url_for("dashboard.index")

@bp.get("/login")
def login_get():
    if gate_session_id():
        return redirect(_safe_next_path(request.args.get("next")))
    expired = request.args.get("expired") == "1"
    return render_template("auth/login.html", expired=expired, next=request.args.get("next") or "")

@bp.post("/login")
@limiter.limit("10 per minute; 100 per hour")
def login_post():
    password = request.form.get("password") or ""
    next_raw = request.form.get("next") or request.args.get("next")

    if not password:
        return render_template("auth/login.html", error="Password is required", next=next_raw or ""), 400

    if not tokens.check_gate_password(password):
        log_event("gate_denied", level=logging.WARNING, ip=request.remote_addr)
        return render_template("auth/login.html", error="Incorrect password", next=next_raw or ""), 400

    sid = open_gate()
    log_event("gate_opened", gate_sid=sid)
    flash("Access granted", "success")
    return redirect(_safe_next_path(next_raw))

@bp.get("/logout")
def logout():
    close_gate()
    return redirect(url_for("auth.login_get"))

@bp.post("/logout")
def logout_post():
    close_gate()
    flash("Logged out successfully", "success")
    return redirect(url_for("auth.login_get"))
