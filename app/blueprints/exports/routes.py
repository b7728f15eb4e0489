from flask import make_response

from app.observability import log_event
from app.services import store
from app.services.exports import responses_csv, export_filename
from . import bp


@bp.get("/responses.csv")
def responses_export_csv():
    rows = store.export_rows()
    csv_str = responses_csv(rows)
    filename = export_filename()

    log_event("responses_exported", rows=len(rows))
    resp = make_response(csv_str)
    resp.headers["Content-Type"] = "text/csv; charset=utf-8"
    resp.headers["Content-Disposition"] = f'attachment; filename="{filename}"'
    return resp
