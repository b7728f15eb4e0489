import csv
import io
from datetime import datetime, timezone
from typing import Iterable, Tuple

CSV_HEADER = ["id", "userName", "questionId", "sentiment", "feedback", "skipped", "timestamp"]


def _iso_utc(ts) -> str:
    if ts is None:
        return ""
    if ts.tzinfo is None:
        # SQLite hands back naive datetimes; they were written as UTC
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def responses_csv(rows: Iterable[Tuple]) -> str:
    """rows: (Response, User) pairs. userName is the user's current display name."""
    buf = io.StringIO(newline="")
    w = csv.writer(buf, lineterminator="\n")
    w.writerow(CSV_HEADER)
    for resp, user in rows:
        w.writerow([
            resp.id,
            user.display_name if user is not None else "",
            resp.question_id,
            resp.sentiment,
            resp.feedback,
            "true" if resp.skipped else "false",
            _iso_utc(resp.created_at),
        ])
    csv_str = buf.getvalue()
    buf.close()
    return csv_str


def export_filename(now: datetime = None) -> str:
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y-%m-%d")
    return f"feedback_responses_{stamp}.csv"
