"""Shared helpers for tests (admin login, CSRF cookie, form tokens)."""
from __future__ import annotations

import re

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "StrongPass123"

_form_token_re = re.compile(r'name="form_token" value="([^"]+)"')


def login(client, email=ADMIN_EMAIL, password=ADMIN_PASSWORD, **extra):
    """POST the login form; the client keeps the access and CSRF cookies."""
    return client.post("/admin/login", data={"email": email, "password": password, **extra})


def csrf(client) -> str:
    """CSRF value flask-jwt-extended expects in the ``csrf_token`` form field."""
    cookie = client.get_cookie("csrf_access_token")
    return cookie.value if cookie else ""


def form_token(html) -> str:
    text = html.decode() if isinstance(html, bytes) else html
    m = _form_token_re.search(text)
    assert m, "form_token not rendered"
    return m.group(1)
