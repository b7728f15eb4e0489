from flask import jsonify, request

from app.services import board, store
from app.services.submission import record_submission
from app.utils.helpers import to_bool, to_int_or_none
from . import bp


@bp.get("/state.json")
def state_json():
    """Question on screen, dropdown users, leaderboard and progress for ?user_id=."""
    user_id = to_int_or_none(request.args.get("user_id"))
    state = board.load_state(user_id)
    state["celebrate"] = board.claim_celebration(state["completed"], user_id)
    return jsonify(state), 200


@bp.get("/leaderboard.json")
def leaderboard_json():
    return jsonify([u.to_dict() for u in store.leaderboard()]), 200


@bp.post("/responses")
def create_response():
    data = request.get_json(silent=True) or {}
    user_id = to_int_or_none(data.get("user_id"))

    # ServiceErrors fall through to the app-level handler (JSON shaped)
    result = record_submission(
        user_id=data.get("user_id"),
        question_id=data.get("question_id"),
        sentiment=data.get("sentiment"),
        feedback=data.get("feedback"),
        skipped=to_bool(data.get("skipped")),
    )
    board.remember_question(result.next_question_id, user_id)

    next_q = store.get_question(result.next_question_id)
    return jsonify({
        "ok": True,
        "recorded": result.recorded,
        "response_id": result.response_id,
        "next_question": next_q.to_dict() if next_q else None,
        "progress": result.progress,
        "completed": result.completed,
        "celebrate": board.claim_celebration(result.completed, user_id),
    }), 201 if result.recorded else 200
