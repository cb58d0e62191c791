"""HTTP helper utilities for API tests."""

from __future__ import annotations

import io
from http.cookies import SimpleCookie

API = "/api/v1"
USERS = f"{API}/users"


def bearer(token: str) -> dict[str, str]:
    """Return an ``Authorization`` header for ``token``."""
    return {"Authorization": f"Bearer {token}"}


def image_part(name: str = "avatar.png", data: bytes = b"\x89PNG fake image") -> tuple[io.BytesIO, str]:
    """Multipart file tuple accepted by the Flask test client."""
    return io.BytesIO(data), name


def register(client, *, username: str = "alice", email: str = "alice@example.com",
             full_name: str = "Alice Moreau", password: str = "s3cretPass!",
             avatar: bool = True, cover: bool = False):
    """POST a multipart registration form."""
    form: dict = {
        "username": username,
        "email": email,
        "fullName": full_name,
        "password": password,
    }
    if avatar:
        form["avatar"] = image_part()
    if cover:
        form["coverImage"] = image_part("cover.jpg")
    return client.post(f"{USERS}/register", data=form, content_type="multipart/form-data")


def login(client, identifier: str = "alice", password: str = "s3cretPass!"):
    return client.post(f"{USERS}/login", json={"username": identifier, "password": password})


def set_cookies(response) -> dict[str, str]:
    """Map cookie name -> raw ``Set-Cookie`` header for ``response``."""
    cookies: dict[str, str] = {}
    for header in response.headers.getlist("Set-Cookie"):
        parsed = SimpleCookie()
        parsed.load(header)
        for name in parsed:
            cookies[name] = header
    return cookies
