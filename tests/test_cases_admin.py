"""Admin write path: create, edit, delete, duplicate submissions, thumbnails."""
import io
from datetime import date
from unittest import mock

import pytest

from models.case_study import CaseStudy
from services.case_study_store import StoreError
from services.submit_guard import get_guard
from tests.utils import csrf, form_token


def _form(client, **overrides):
    data = {
        "csrf_token": csrf(client),
        "title": "Acme Corp: 3x ROI!",
        "slug": "",
        "description": "How Acme tripled ROI",
        "date": "2025-02-03",
        "tags": "Real Estate, Voice AI, , Automation",
        "read_time": "5 min read",
        "author": "team",
        "thumbnail": "",
        "content": "## Results\n\nGreat.",
    }
    data.update(overrides)
    return data


def _new_token(client):
    return form_token(client.get("/admin/case-studies/new").data)


def _get(app, **filters):
    with app.app_context():
        return CaseStudy.query.filter_by(**filters).one_or_none()


def test_list_empty_state(admin_client):
    resp = admin_client.get("/admin")
    assert resp.status_code == 200
    assert b"Get started by creating your first case study" in resp.data


def test_new_form_prefills_defaults(admin_client):
    html = admin_client.get("/admin/case-studies/new").get_data(as_text=True)
    assert "New Case Study" in html
    assert 'data-mode="create"' in html
    assert f'value="{date.today().isoformat()}"' in html
    assert 'name="author" value="team"' in html


def test_create_derives_slug_parses_tags_and_redirects(app, admin_client, count_case_studies):
    token = _new_token(admin_client)
    resp = admin_client.post("/admin/case-studies/new", data=_form(admin_client, form_token=token, featured="on"))
    assert resp.status_code == 302
    assert resp.headers["Location"] == "/admin"

    c = _get(app, slug="acme-corp-3x-roi")
    assert c is not None
    assert c.tags == ["Real Estate", "Voice AI", "Automation"]
    assert c.featured is True
    assert c.date == date(2025, 2, 3)
    assert c.thumbnail is None
    assert count_case_studies() == 1

    listing = admin_client.get("/admin").get_data(as_text=True)
    assert "Acme Corp: 3x ROI!" in listing
    assert "Saved" in listing


def test_slug_collision_is_shown_inline_and_form_kept(admin_client, make_case_study, count_case_studies):
    make_case_study("acme-corp-3x-roi")
    token = _new_token(admin_client)
    resp = admin_client.post("/admin/case-studies/new", data=_form(admin_client, form_token=token, description="Keep me"))
    assert resp.status_code == 200
    html = resp.get_data(as_text=True)
    assert 'id="form-error"' in html
    assert "UNIQUE constraint failed" in html
    assert "Keep me" in html
    assert count_case_studies() == 1

    # retry with the same token after fixing the slug goes through
    resp = admin_client.post(
        "/admin/case-studies/new",
        data=_form(admin_client, form_token=token, slug="acme-corp-3x-roi-2"),
    )
    assert resp.status_code == 302
    assert count_case_studies() == 2


def test_missing_required_fields_stay_on_form(admin_client, count_case_studies):
    token = _new_token(admin_client)
    resp = admin_client.post("/admin/case-studies/new", data=_form(admin_client, form_token=token, title="", description=""))
    assert resp.status_code == 200
    assert b"Title is required." in resp.data
    assert count_case_studies() == 0


def test_double_submit_inserts_once(admin_client, count_case_studies):
    token = _new_token(admin_client)
    data = _form(admin_client, form_token=token)
    first = admin_client.post("/admin/case-studies/new", data=data)
    second = admin_client.post("/admin/case-studies/new", data=data)
    assert first.status_code == 302
    assert second.status_code == 302
    assert count_case_studies() == 1
    assert b"already being processed" in admin_client.get("/admin").data


def test_submit_while_in_flight_is_dropped(app, admin_client, count_case_studies):
    token = _new_token(admin_client)
    with app.app_context():
        assert get_guard().acquire(f"create::{token}")
    resp = admin_client.post("/admin/case-studies/new", data=_form(admin_client, form_token=token))
    assert resp.status_code == 302
    assert count_case_studies() == 0


def test_unexpected_failure_releases_token_for_retry(admin_client, count_case_studies):
    token = _new_token(admin_client)
    data = _form(admin_client, form_token=token)
    with mock.patch("services.case_study_store.insert", side_effect=RuntimeError("connection reset")):
        with pytest.raises(RuntimeError):
            admin_client.post("/admin/case-studies/new", data=data)
    assert count_case_studies() == 0

    resp = admin_client.post("/admin/case-studies/new", data=_form(admin_client, form_token=token))
    assert resp.status_code == 302
    assert count_case_studies() == 1
    assert b"already being processed" not in admin_client.get("/admin").data


def test_delete_store_failure_allows_retry(admin_client, make_case_study, count_case_studies):
    cid, _ = make_case_study("flaky-delete")
    token = form_token(admin_client.get("/admin").data)
    data = {"csrf_token": csrf(admin_client), "form_token": token}
    with mock.patch("services.case_study_store.delete", side_effect=StoreError("db down")):
        resp = admin_client.post(f"/admin/case-studies/{cid}/delete", data=data)
    assert resp.status_code == 302
    assert count_case_studies() == 1
    assert b"Error deleting case study: db down" in admin_client.get("/admin").data

    admin_client.post(f"/admin/case-studies/{cid}/delete", data=data)
    assert count_case_studies() == 0


def test_missing_form_token_is_bad_request(admin_client):
    resp = admin_client.post("/admin/case-studies/new", data=_form(admin_client))
    assert resp.status_code == 400


def test_edit_keeps_slug_and_store_managed_fields(app, admin_client, make_case_study):
    cid, _ = make_case_study("original-slug", title="Original", tags=["AI"])
    before = _get(app, id=cid)

    page = admin_client.get(f"/admin/case-studies/{cid}/edit")
    assert page.status_code == 200
    assert b'data-mode="edit"' in page.data
    token = form_token(page.data)

    resp = admin_client.post(
        f"/admin/case-studies/{cid}/edit",
        data=_form(admin_client, form_token=token, title="Renamed Title", slug="original-slug", tags="AI, SaaS"),
    )
    assert resp.status_code == 302
    after = _get(app, id=cid)
    assert after.title == "Renamed Title"
    assert after.slug == "original-slug"
    assert after.tags == ["AI", "SaaS"]
    assert after.created_at == before.created_at


def test_edit_unknown_id_is_404(admin_client):
    assert admin_client.get("/admin/case-studies/nope/edit").status_code == 404


def test_delete(admin_client, make_case_study, count_case_studies):
    cid, _ = make_case_study("to-delete", title="To Delete")
    token = form_token(admin_client.get("/admin").data)
    assert b'Are you sure you want to delete' in admin_client.get("/admin").data

    resp = admin_client.post(f"/admin/case-studies/{cid}/delete", data={"csrf_token": csrf(admin_client), "form_token": token})
    assert resp.status_code == 302
    assert count_case_studies() == 0

    again = admin_client.post(f"/admin/case-studies/{cid}/delete", data={"csrf_token": csrf(admin_client), "form_token": token})
    assert again.status_code == 302


def test_thumbnail_file_overrides_typed_url(app, admin_client):
    token = _new_token(admin_client)
    data = _form(admin_client, form_token=token, thumbnail="https://cdn.example.com/typed.png")
    data["thumbnail_file"] = (io.BytesIO(b"\x89PNG fake"), "cover.png")
    resp = admin_client.post("/admin/case-studies/new", data=data, content_type="multipart/form-data")
    assert resp.status_code == 302
    c = _get(app, slug="acme-corp-3x-roi")
    assert c.thumbnail.startswith("/media/case-studies/thumbnails/")
    assert c.thumbnail.endswith(".png")
    assert admin_client.get(c.thumbnail).status_code == 200


def test_typed_thumbnail_url_is_saved(app, admin_client):
    token = _new_token(admin_client)
    resp = admin_client.post(
        "/admin/case-studies/new",
        data=_form(admin_client, form_token=token, thumbnail="https://cdn.example.com/typed.png"),
    )
    assert resp.status_code == 302
    assert _get(app, slug="acme-corp-3x-roi").thumbnail == "https://cdn.example.com/typed.png"


def test_upload_failure_keeps_previous_thumbnail(app, admin_client, make_case_study):
    cid, _ = make_case_study("with-thumb", thumbnail="https://cdn.example.com/old.png")
    token = form_token(admin_client.get(f"/admin/case-studies/{cid}/edit").data)
    data = _form(admin_client, form_token=token, slug="with-thumb", thumbnail="https://cdn.example.com/old.png")
    data["thumbnail_file"] = (io.BytesIO(b"MZ"), "payload.exe")
    resp = admin_client.post(f"/admin/case-studies/{cid}/edit", data=data, content_type="multipart/form-data")
    assert resp.status_code == 200
    html = resp.get_data(as_text=True)
    assert "Error uploading image" in html
    assert "https://cdn.example.com/old.png" in html
    assert _get(app, id=cid).thumbnail == "https://cdn.example.com/old.png"


def test_async_upload_endpoint(admin_client):
    resp = admin_client.post(
        "/admin/uploads",
        data={"csrf_token": csrf(admin_client), "form_token": "t", "file": (io.BytesIO(b"img"), "shot.JPG")},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 200
    url = resp.get_json()["url"]
    assert url.startswith("/media/case-studies/thumbnails/") and url.endswith(".jpg")

    bad = admin_client.post(
        "/admin/uploads",
        data={"csrf_token": csrf(admin_client), "file": (io.BytesIO(b"x"), "notes.txt")},
        content_type="multipart/form-data",
    )
    assert bad.status_code == 400
    assert "Unsupported file type" in bad.get_json()["error"]
