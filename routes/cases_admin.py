from flask import (
    Blueprint, abort, current_app, flash, redirect, render_template, request, url_for,
)

from routes.auth import admin_required
from services import case_study_store as store
from services.case_study_form import CaseStudyForm
from services.storage import StorageError, upload_thumbnail
from services.submit_guard import DuplicateSubmission, SubmitGuard, get_guard

cases_admin_bp = Blueprint("cases_admin", __name__, url_prefix="/admin")

DUPLICATE_MSG = "That submission is already being processed."


def _guard_key(action: str, target: str = "") -> str | None:
    token = (request.form.get("form_token") or "").strip()
    if not token:
        return None
    return f"{action}:{target}:{token}"


def _render_form(form: CaseStudyForm, case_study=None, error=None, status=200):
    return render_template(
        "admin/form.html",
        form=form,
        case_study=case_study,
        error=error,
        form_token=SubmitGuard.issue_token(),
        authors=current_app.config.get("AUTHORS") or {},
    ), status


def _attach_upload(form: CaseStudyForm) -> str | None:
    """表单里带了文件就先上传，成功则覆盖手填的 URL（后写的生效）。返回错误信息。"""
    file = request.files.get("thumbnail_file")
    if not file or not file.filename:
        return None
    try:
        form.thumbnail = upload_thumbnail(file)
    except StorageError as e:
        current_app.logger.warning("thumbnail upload rejected: %s", e.message)
        return f"Error uploading image: {e.message}"
    return None


class _Rejected(Exception):
    """表单这次没存成功：带着错误信息回到表单，token 被释放，可原样重试。"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def _submit(form: CaseStudyForm, case_study=None):
    """create / edit 共用：校验 -> 上传 -> 写库；失败原样回填表单。"""
    key = _guard_key(form.mode, case_study.id if case_study else "")
    if key is None:
        abort(400)

    try:
        with get_guard().hold(key):
            if not form.validate():
                raise _Rejected(" ".join(form.errors))
            upload_error = _attach_upload(form)
            if upload_error:
                raise _Rejected(upload_error)
            try:
                if form.is_create:
                    saved = store.insert(form.to_payload())
                else:
                    saved = store.update(case_study.id, form.to_payload())
            except store.StoreError as e:
                raise _Rejected(e.message) from e
            if saved is None:
                abort(404)
    except DuplicateSubmission:
        flash(DUPLICATE_MSG, "info")
        return redirect(url_for("cases_admin.admin_list"))
    except _Rejected as e:
        return _render_form(form, case_study, error=e.message)

    flash(f'Saved "{saved.title}"', "success")
    return redirect(url_for("cases_admin.admin_list"))


@cases_admin_bp.get("")
@admin_required
def admin_list():
    error = None
    try:
        items = store.list_for_admin()
    except store.StoreError as e:
        items, error = [], e.message
    return render_template(
        "admin/list.html",
        items=items,
        error=error,
        form_token=SubmitGuard.issue_token(),
    )


@cases_admin_bp.route("/case-studies/new", methods=["GET", "POST"])
@admin_required
def admin_create():
    if request.method == "POST":
        return _submit(CaseStudyForm.from_request(request.form, mode="create"))
    return _render_form(CaseStudyForm.blank(current_app.config.get("DEFAULT_AUTHOR", "")))


@cases_admin_bp.route("/case-studies/<cid>/edit", methods=["GET", "POST"])
@admin_required
def admin_edit(cid):
    c = store.get_by_id(cid)
    if c is None:
        abort(404)
    if request.method == "POST":
        return _submit(CaseStudyForm.from_request(request.form, mode="edit"), case_study=c)
    return _render_form(CaseStudyForm.from_record(c), case_study=c)


@cases_admin_bp.post("/case-studies/<cid>/delete")
@admin_required
def admin_delete(cid):
    key = _guard_key("delete", cid)
    if key is None:
        abort(400)

    try:
        with get_guard().hold(key):
            try:
                deleted = store.delete(cid)
            except store.StoreError as e:
                raise _Rejected(e.message) from e
            if not deleted:
                abort(404)
    except DuplicateSubmission:
        flash(DUPLICATE_MSG, "info")
        return redirect(url_for("cases_admin.admin_list"))
    except _Rejected as e:
        flash(f"Error deleting case study: {e.message}", "error")
        return redirect(url_for("cases_admin.admin_list"))

    flash("Case study deleted", "success")
    return redirect(url_for("cases_admin.admin_list"))
