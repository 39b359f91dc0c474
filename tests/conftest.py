from __future__ import annotations

from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import identity_generator, session_store
from app.main import app

CLIENT_ID = "client-a"
REDIRECT_URI = "https://cb"
STATE = "xyz"
PHONE = "79990000001"


@pytest.fixture(autouse=True)
def reset_stores() -> None:
    """Clear the process-wide code/token and identity stores between tests."""
    session_store.clear()
    identity_generator.clear()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app, follow_redirects=False)


def authorize(
    client: TestClient,
    phone: str = PHONE,
    client_id: str = CLIENT_ID,
    redirect_uri: str = REDIRECT_URI,
    state: str = STATE,
) -> str:
    """Submit the authorize form and return the code from the redirect."""
    resp = client.post(
        "/aas/oauth2/authorize",
        data={
            "client_id": client_id,
            "redirect_uri": redirect_uri,
            "state": state,
            "phone": phone,
        },
    )
    assert resp.status_code == 302, resp.text
    query = parse_qs(urlparse(resp.headers["location"]).query)
    return query["code"][0]


def exchange(client: TestClient, code: str, client_id: str = CLIENT_ID):
    return client.post(
        "/aas/oauth2/te",
        data={
            "grant_type": "authorization_code",
            "code": code,
            "client_id": client_id,
            "redirect_uri": REDIRECT_URI,
        },
    )


def login(client: TestClient, phone: str = PHONE) -> str:
    """Run authorize + token exchange; return the access token."""
    resp = exchange(client, authorize(client, phone=phone))
    assert resp.status_code == 200, resp.text
    return resp.json()["access_token"]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
