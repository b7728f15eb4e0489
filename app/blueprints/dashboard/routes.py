from flask import render_template, request, redirect, url_for, flash, session, current_app

from app.models import SENTIMENT_CHOICES, FEEDBACK_CHOICES
from app.services import board
from app.services.errors import ServiceError, ValidationError
from app.services.submission import record_submission
from app.utils.helpers import to_int_or_none
from . import bp

SELECTED_USER_KEY = "selected_user_id"
PENDING_CELEBRATION_KEY = "pending_celebration"


def _selected_user_id():
    # ?user_id= switches the actor; otherwise keep whoever was picked last
    if "user_id" in request.args:
        uid = to_int_or_none(request.args.get("user_id"))
        if uid:
            session[SELECTED_USER_KEY] = uid
        else:
            session.pop(SELECTED_USER_KEY, None)
        return uid
    return session.get(SELECTED_USER_KEY)


@bp.get("/")
def index():
    user_id = _selected_user_id()
    try:
        state = board.load_state(user_id)
    except ServiceError as exc:
        current_app.logger.warning("dashboard state unavailable: %s", exc)
        return render_template("errors/notice.html", message=exc.public_message), exc.status_code

    celebrate = bool(session.pop(PENDING_CELEBRATION_KEY, False))
    if not celebrate:
        celebrate = board.claim_celebration(state["completed"], user_id)

    return render_template(
        "dashboard/index.html",
        state=state,
        sentiments=SENTIMENT_CHOICES,
        feedback_choices=FEEDBACK_CHOICES,
        celebrate=celebrate,
    )


@bp.post("/submit")
def submit():
    """Form post from the tagging screen: action=log records a tag, action=skip moves on."""
    form = request.form
    skipped = (form.get("action") or "log") == "skip"
    user_id = to_int_or_none(form.get("user_id"))
    if user_id:
        session[SELECTED_USER_KEY] = user_id

    try:
        result = record_submission(
            user_id=form.get("user_id"),
            question_id=form.get("question_id"),
            sentiment=form.get("sentiment"),
            feedback=form.get("feedback"),
            skipped=skipped,
        )
    except ValidationError as exc:
        flash(exc.public_message, "warning")
        return redirect(url_for("dashboard.index"))
    except ServiceError as exc:
        current_app.logger.warning("submit failed: %s", exc)
        flash(exc.public_message, "error")
        return redirect(url_for("dashboard.index"))

    board.remember_question(result.next_question_id, user_id)
    if board.claim_celebration(result.completed, user_id):
        session[PENDING_CELEBRATION_KEY] = True
    flash("Response skipped" if skipped else "Response recorded", "info" if skipped else "success")
    return redirect(url_for("dashboard.index"))
