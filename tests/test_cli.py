from werkzeug.security import check_password_hash

from app.cli import DEMO_QUESTIONS, DEMO_USERS
from app.extensions import db
from app.models import Question, Response, User
from app.services import store


def test_seed_demo_is_idempotent(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["seed", "demo"])
    assert result.exit_code == 0, result.output
    assert f"questions={len(DEMO_QUESTIONS)} users={len(DEMO_USERS)}" in result.output

    again = runner.invoke(args=["seed", "demo"])
    assert "questions=0 users=0" in again.output
    with app.app_context():
        assert db.session.query(Question).count() == len(DEMO_QUESTIONS)
        assert db.session.query(User).count() == len(DEMO_USERS)


def test_seed_questions_from_csv(app, tmp_path):
    sheet = tmp_path / "questions.csv"
    sheet.write_text(
        "Question,Answer\n"
        "Is search fast enough?,Mostly yes.\n"
        ",orphan answer\n"
        "\"Would you, personally, recommend us?\",\n",
        encoding="utf-8",
    )
    result = app.test_cli_runner().invoke(args=["seed", "questions", "--file", str(sheet)])
    assert result.exit_code == 0, result.output
    assert "inserted=2 updated=0" in result.output
    with app.app_context():
        rows = db.session.query(Question).order_by(Question.id).all()
        assert [q.prompt for q in rows] == ["Is search fast enough?", "Would you, personally, recommend us?"]
        assert rows[1].reference_answer == ""


def test_seed_questions_updates_by_id(app, tmp_path):
    with app.app_context():
        q = Question(prompt="Old wording?", reference_answer="old")
        db.session.add(q)
        db.session.commit()
        qid = q.id
    sheet = tmp_path / "q.csv"
    sheet.write_text(f"id,prompt,reference_answer\n{qid},New wording?,new\n", encoding="utf-8")

    result = app.test_cli_runner().invoke(args=["seed", "questions", "--file", str(sheet)])
    assert "inserted=0 updated=1" in result.output
    with app.app_context():
        assert db.session.get(Question, qid).prompt == "New wording?"


def test_seed_questions_requires_prompt_column(app, tmp_path):
    sheet = tmp_path / "bad.csv"
    sheet.write_text("title\nhello\n", encoding="utf-8")
    result = app.test_cli_runner().invoke(args=["seed", "questions", "--file", str(sheet)])
    assert result.exit_code != 0
    assert "prompt" in result.output


def test_users_create_rename_deactivate(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["users", "create", "--name", "  Dana   Scully "])
    assert result.exit_code == 0, result.output
    with app.app_context():
        user = db.session.query(User).one()
        uid = user.id
        assert user.display_name == "Dana Scully"

    result = runner.invoke(args=["users", "rename", "--id", str(uid), "--name", "Dana K. Scully"])
    assert result.exit_code == 0, result.output

    result = runner.invoke(args=["users", "deactivate", "--id", str(uid)])
    assert result.exit_code == 0, result.output
    with app.app_context():
        user = db.session.get(User, uid)
        assert user.display_name == "Dana K. Scully"
        assert user.is_active is False
        assert store.list_active_users() == []


def test_users_create_rejects_blank_name(app):
    result = app.test_cli_runner().invoke(args=["users", "create", "--name", "   "])
    assert result.exit_code != 0
    assert "Name is required" in result.output


def test_users_recount(app, seeded):
    q1 = seeded["questions"][0]
    with app.app_context():
        db.session.add(Response(id=store.new_response_id(), user_id=seeded["ben"], question_id=q1,
                                sentiment="Neutral", feedback="Feedback", skipped=False))
        db.session.commit()
    result = app.test_cli_runner().invoke(args=["users", "recount"])
    assert result.exit_code == 0, result.output
    assert "Recounted 2 users" in result.output
    with app.app_context():
        assert db.session.get(User, seeded["ben"]).submission_count == 1


def test_gate_hash_password(app):
    result = app.test_cli_runner().invoke(args=["gate", "hash-password", "--password", "hunter2"])
    assert result.exit_code == 0, result.output
    assert check_password_hash(result.output.strip(), "hunter2")
