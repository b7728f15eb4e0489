from flask import abort, g, jsonify, redirect, request, session, url_for
from app.services import tokens

GATE_TOKEN_KEY = "gate_token"
GATE_SID_KEY = "gate_sid"


def _wants_json() -> bool:
    accept = (request.headers.get("Accept") or "").lower()
    return (
        "application/json" in accept
        or request.is_json
        or request.path.endswith(".json")
        or request.path.endswith(".csv")
        or request.blueprint == "api"
    )


def gate_session_id():
    """Verified gate session id for this request, or None (missing, tampered or expired)."""
    sid = tokens.verify_gate_session(session.get(GATE_TOKEN_KEY) or "")
    if sid is None or sid != session.get(GATE_SID_KEY):
        return None
    return sid


def open_gate() -> str:
    sid, token = tokens.issue_gate_session()
    session.clear()
    session[GATE_SID_KEY] = sid
    session[GATE_TOKEN_KEY] = token
    return sid


def close_gate() -> None:
    session.clear()


def enforce_gate():
    """
    Returns None when the browser is past the gate; otherwise a redirect (HTML)
    or a JSON 401. Usable as a blueprint before_request hook.
    """
    sid = gate_session_id()
    if sid:
        g.gate_sid = sid
        return None
    had_token = bool(session.get(GATE_TOKEN_KEY))
    close_gate()
    if _wants_json():
        return _abort_smart(401)
    args = {"next": request.full_path if request.query_string else request.path}
    if had_token:
        args["expired"] = "1"
    return redirect(url_for("auth.login_get", **args))


def _abort_smart(code: int):
    # If the client asked for JSON, return a JSON-shaped error
    if _wants_json():
        return jsonify({"error": {401: "unauthorized", 403: "forbidden", 404: "not_found"}[code], "code": code}), code
    abort(code)
