import click
import pandas as pd
from flask.cli import with_appcontext
from werkzeug.security import generate_password_hash

from app.extensions import db
from app.models import Question, User
from app.services import store
from app.services.errors import BackendError
from app.utils.validators import clean_display_name, clean_str

DEMO_USERS = (
    "John Doe", "Jane Smith", "Robert Johnson", "Emily Davis", "Michael Brown",
    "Sarah Wilson", "David Taylor", "Amanda Miller", "Thomas Anderson", "Lisa White",
)

DEMO_QUESTIONS = (
    ("How satisfied are you with the application's user interface?",
     "The interface is clean and intuitive, with good use of white space and clear visual hierarchy."),
    ("What do you think about the response time of the system?",
     "Response times are excellent. Most actions complete in under a second."),
    ("How would you rate the onboarding experience?",
     "The onboarding is straightforward, but could use more tooltips for first-time users."),
    ("Is the documentation clear and helpful?",
     "Documentation is comprehensive but could be organized better for easier reference."),
    ("What features would you like to see added or improved?",
     "Integration with third-party apps would greatly enhance the functionality."),
)


def _read_question_sheet(path: str) -> pd.DataFrame:
    if path.lower().endswith((".xlsx", ".xls")):
        df = pd.read_excel(path)
    else:
        df = pd.read_csv(path)
    df = df.rename(columns={c: str(c).strip().lower() for c in df.columns})
    # Accept the column names used by the old front-end export as well
    df = df.rename(columns={"question": "prompt", "answer": "reference_answer"})
    if "prompt" not in df.columns:
        raise click.ClickException("Question sheet needs a 'prompt' (or 'question') column")
    df = df.dropna(subset=["prompt"])
    if "reference_answer" not in df.columns:
        df["reference_answer"] = ""
    if "id" in df.columns:
        df["id"] = pd.to_numeric(df["id"], errors="coerce")
    df["reference_answer"] = df["reference_answer"].fillna("")
    return df


@click.group()
def seed():
    """Seed helpers."""

@seed.command("demo")
@with_appcontext
def seed_demo():
    """Five sample questions and ten sample users (skips whatever already exists)."""
    added_q = 0
    for prompt, answer in DEMO_QUESTIONS:
        if db.session.query(Question).filter_by(prompt=prompt).count():
            continue
        db.session.add(Question(prompt=prompt, reference_answer=answer))
        added_q += 1
    added_u = 0
    for name in DEMO_USERS:
        if db.session.query(User).filter_by(display_name=name).count():
            continue
        db.session.add(User(display_name=name, submission_count=0, is_active=True))
        added_u += 1
    db.session.commit()
    click.echo(f"Seeded questions={added_q} users={added_u}")

@seed.command("questions")
@click.option("--file", "path", required=True, type=click.Path(exists=True, dir_okay=False))
@with_appcontext
def seed_questions(path):
    """Import questions from CSV/XLSX (columns: prompt, reference_answer, optional id)."""
    df = _read_question_sheet(path)
    inserted = updated = 0
    for _, r in df.iterrows():
        prompt = clean_str(r.get("prompt"), max_len=10_000)
        if not prompt:
            continue
        answer = clean_str(r.get("reference_answer"), max_len=10_000) or ""
        qid = r.get("id")
        existing = db.session.get(Question, int(qid)) if pd.notna(qid) else None
        if existing:
            existing.prompt = prompt
            existing.reference_answer = answer
            updated += 1
        else:
            q = Question(prompt=prompt, reference_answer=answer)
            if pd.notna(qid):
                q.id = int(qid)
            db.session.add(q)
            inserted += 1
    db.session.commit()
    click.echo(f"Questions inserted={inserted} updated={updated}")


@click.group()
def users():
    """User management."""

@users.command("create")
@click.option("--name", required=True)
@with_appcontext
def users_create(name):
    display_name = clean_display_name(name)
    if not display_name:
        raise click.ClickException("Name is required")
    try:
        user = store.create_user(display_name)
    except BackendError as exc:
        raise click.ClickException(str(exc))
    click.echo(f"User created id={user.id} name={user.display_name}")

@users.command("rename")
@click.option("--id", "user_id", type=int, required=True)
@click.option("--name", required=True)
@with_appcontext
def users_rename(user_id, name):
    display_name = clean_display_name(name)
    if not display_name:
        raise click.ClickException("Name is required")
    try:
        user = store.rename_user(user_id, display_name)
    except BackendError as exc:
        raise click.ClickException(str(exc))
    click.echo(f"User {user.id} renamed to {user.display_name}")

@users.command("deactivate")
@click.option("--id", "user_id", type=int, required=True)
@with_appcontext
def users_deactivate(user_id):
    user = db.session.get(User, user_id)
    if not user:
        raise click.ClickException("User not found")
    user.is_active = False
    db.session.commit()
    click.echo(f"User {user.id} deactivated")

@users.command("recount")
@with_appcontext
def users_recount():
    """Rebuild submission counts from tagged responses."""
    try:
        n = store.recount_submissions()
    except BackendError as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Recounted {n} users")


@click.group()
def gate():
    """Password gate ops."""

@gate.command("hash-password")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
def gate_hash_password(password):
    """Print a GATE_PASSWORD_HASH value for the given password."""
    if not password:
        raise click.ClickException("Password is required")
    click.echo(generate_password_hash(password))


def register_cli(app):
    app.cli.add_command(seed)
    app.cli.add_command(users)
    app.cli.add_command(gate)
