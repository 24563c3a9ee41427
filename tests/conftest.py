"""Fixtures: app on in-memory SQLite, temp media dir, seeded admin user."""
from __future__ import annotations

from datetime import date

import pytest

from app import create_app
from create_admin import create_admin
from extensions import db
from models.case_study import CaseStudy
from tests.utils import ADMIN_EMAIL, ADMIN_PASSWORD, login


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "SQLALCHEMY_ENGINE_OPTIONS": {},
        "SECRET_KEY": "test-secret",
        "JWT_SECRET_KEY": "test-jwt-secret-0123456789abcdef0123456789",
        "MEDIA_ROOT": str(tmp_path / "media"),
    })
    with app.app_context():
        db.create_all()
        create_admin(ADMIN_EMAIL, ADMIN_PASSWORD)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(client):
    resp = login(client)
    assert resp.status_code == 302
    return client


@pytest.fixture
def make_case_study(app):
    """Insert a CaseStudy row directly; returns (id, slug)."""

    def _make(slug, title=None, tags=(), day=date(2025, 1, 1), **extra):
        with app.app_context():
            c = CaseStudy(
                slug=slug,
                title=title or slug.replace("-", " ").title(),
                description=extra.pop("description", f"About {slug}"),
                date=day,
                tags=list(tags),
                content=extra.pop("content", f"## Overview\n\nBody of {slug}."),
                **extra,
            )
            db.session.add(c)
            db.session.commit()
            return c.id, c.slug

    return _make


@pytest.fixture
def count_case_studies(app):
    def _count():
        with app.app_context():
            return CaseStudy.query.count()
    return _count
