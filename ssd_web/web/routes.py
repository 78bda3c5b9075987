## routes.py
from __future__ import annotations

from flask import Blueprint, Response, abort, current_app, jsonify, redirect, render_template, request, url_for

from ssd_web.config import AppSettings
from ssd_web.domain.models import BatchResult
from ssd_web.services.aggregation import summarize
from ssd_web.services.identifier_normalization import cap_batch, split_identifiers
from ssd_web.services.reporting import TABLE_COLUMNS, frequency_rows, table_rows, to_csv, to_dict


def create_blueprint(batch_service, batch_repo, settings: AppSettings) -> Blueprint:
    bp = Blueprint("web", __name__)

    def _get_run_or_404(run_id: str) -> BatchResult:
        result = batch_repo.get(run_id)
        if result is None:
            abort(404)
        return result

    def _render_form(identifiers: str = "", error: str | None = None, code: int = 200):
        latest = batch_repo.latest()
        return render_template(
            "index.html",
            identifiers=identifiers,
            max_batch=settings.max_batch,
            error=error,
            latest_run_id=latest[0] if latest else None,
        ), code

    def _render_result(run_id: str, result: BatchResult, warning: str | None = None):
        summary = summarize(result)
        return render_template(
            "result.html",
            run_id=run_id,
            generated_at=result.generated_at,
            warning=warning,
            columns=TABLE_COLUMNS,
            rows=table_rows(result),
            summary=summary,
            frequency=frequency_rows(summary),
            log_entries=result.log_entries,
        )

    @bp.get("/")
    def index():
        return _render_form()

    @bp.post("/run")
    def run_batch():
        raw = request.form.get("identifiers") or ""
        identifiers = split_identifiers(raw)

        if not identifiers:
            return _render_form(raw, error="Enter at least one PMC identifier.", code=400)

        identifiers, truncated = cap_batch(identifiers, settings.max_batch)
        warning = None
        if truncated:
            warning = f"Only the first {settings.max_batch} identifiers were processed."
            current_app.logger.warning("Batch truncated to %d identifiers", settings.max_batch)

        result: BatchResult = batch_service.run(identifiers)
        run_id = batch_repo.save(result)
        summary = summarize(result)

        current_app.logger.info(
            "Run %s: %d processed, %d accessible, %d with software",
            run_id, summary.total_count, summary.accessible_count, summary.software_detected_count,
        )

        return _render_result(run_id, result, warning)

    @bp.get("/runs/<run_id>")
    def show_run(run_id: str):
        return _render_result(run_id, _get_run_or_404(run_id))

    @bp.get("/runs/<run_id>/results.csv")
    def download_csv(run_id: str):
        result = _get_run_or_404(run_id)
        return Response(
            to_csv(result),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename=software_detection_{run_id}.csv"},
        )

    @bp.get("/runs/<run_id>/results.json")
    def download_json(run_id: str):
        result = _get_run_or_404(run_id)
        return jsonify(to_dict(result, summarize(result)))

    @bp.post("/clear")
    def clear():
        batch_repo.clear()
        return redirect(url_for("web.index"))

    return bp
