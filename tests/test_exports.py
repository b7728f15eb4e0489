import csv
import io
from datetime import datetime, timezone
from types import SimpleNamespace

from app.services import store
from app.services.exports import CSV_HEADER, export_filename, responses_csv


def test_csv_header_and_row_format():
    resp = SimpleNamespace(
        id="r-1", question_id=4, sentiment="Positive", feedback="Praise", skipped=False,
        created_at=datetime(2024, 5, 6, 7, 8, 9, 123456, tzinfo=timezone.utc),
    )
    skip = SimpleNamespace(
        id="r-2", question_id=5, sentiment="N/A", feedback="N/A", skipped=True,
        created_at=datetime(2024, 5, 6, 7, 9, 0),  # naive, as SQLite returns it
    )
    user = SimpleNamespace(display_name="Smith, Jane")

    lines = responses_csv([(resp, user), (skip, user)]).splitlines()
    assert lines[0] == "id,userName,questionId,sentiment,feedback,skipped,timestamp"
    assert lines[1] == 'r-1,"Smith, Jane",4,Positive,Praise,false,2024-05-06T07:08:09.123Z'
    assert lines[2] == 'r-2,"Smith, Jane",5,N/A,N/A,true,2024-05-06T07:09:00.000Z'


def test_empty_export_is_header_only():
    assert responses_csv([]) == ",".join(CSV_HEADER) + "\n"


def test_export_filename_uses_date():
    assert export_filename(datetime(2024, 1, 31, 23, 0)) == "feedback_responses_2024-01-31.csv"


def test_export_route_downloads_current_names(app, gated_client, seeded):
    q1, q2, _ = seeded["questions"]
    for qid in (q1, q2):
        gated_client.post("/api/responses", json={
            "user_id": seeded["ann"], "question_id": qid, "sentiment": "Positive", "feedback": "Praise",
        })
    with app.app_context():
        store.rename_user(seeded["ann"], "Annie")

    resp = gated_client.get("/exports/responses.csv")
    assert resp.status_code == 200
    assert resp.headers["Content-Type"].startswith("text/csv")
    assert 'attachment; filename="feedback_responses_' in resp.headers["Content-Disposition"]

    rows = list(csv.DictReader(io.StringIO(resp.get_data(as_text=True))))
    assert [r["questionId"] for r in rows] == [str(q1), str(q2)]
    assert {r["userName"] for r in rows} == {"Annie"}
    assert all(r["skipped"] == "false" for r in rows)
    assert all(r["timestamp"].endswith("Z") for r in rows)
