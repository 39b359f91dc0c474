"""Authorization code flow, driven the way a client app drives it.

Flow:
  1. Form      : GET /aas/oauth2/ac renders the phone-number form
  2. Submit    : POST /aas/oauth2/authorize → 302 to redirect_uri with code
  3. Token     : POST /aas/oauth2/te → access / refresh / id tokens
  4. User data : GET /userinfo with the Bearer token
"""

from __future__ import annotations

from urllib.parse import parse_qs, urlparse

from fastapi.testclient import TestClient

from app.services.id_token import peek_id_token
from tests.conftest import (
    CLIENT_ID,
    PHONE,
    REDIRECT_URI,
    STATE,
    authorize,
    bearer,
    exchange,
)


def test_full_flow_happy_path(client: TestClient) -> None:
    # ── Form ──────────────────────────────────────────────────────────
    page = client.get(
        "/aas/oauth2/ac",
        params={
            "client_id": CLIENT_ID,
            "redirect_uri": REDIRECT_URI,
            "state": STATE,
            "scope": "openid fullname",
            "response_type": "code",
        },
    )
    assert page.status_code == 200
    assert page.headers["content-type"].startswith("text/html")
    assert 'name="phone"' in page.text
    assert f'value="{CLIENT_ID}"' in page.text

    # ── Submit ────────────────────────────────────────────────────────
    resp = client.post(
        "/aas/oauth2/authorize",
        data={
            "client_id": CLIENT_ID,
            "redirect_uri": REDIRECT_URI,
            "state": STATE,
            "phone": PHONE,
        },
    )
    assert resp.status_code == 302
    location = urlparse(resp.headers["location"])
    assert f"{location.scheme}://{location.netloc}" == REDIRECT_URI
    query = parse_qs(location.query)
    assert query["state"] == [STATE]
    code = query["code"][0]

    # ── Token ─────────────────────────────────────────────────────────
    token_resp = exchange(client, code)
    assert token_resp.status_code == 200, token_resp.text
    data = token_resp.json()
    assert data["access_token"]
    assert data["refresh_token"]
    assert data["id_token"]
    assert data["expires_in"] == 3600
    assert data["token_type"] == "Bearer"
    assert peek_id_token(data["id_token"])["sub"] == PHONE

    # ── User data ─────────────────────────────────────────────────────
    info = client.get("/userinfo", headers=bearer(data["access_token"]))
    assert info.status_code == 200
    person = info.json()
    assert person["mobile"] == PHONE
    assert person["oid"] == "1220772984"
    assert person["firstName"] == "Анна"
    assert int(person["birthDate"].split(".")[0]) <= 28

    # Same person on a repeat lookup
    again = client.get("/userinfo", headers=bearer(data["access_token"]))
    assert again.json() == person


def test_alternate_authorize_path_renders_form(client: TestClient) -> None:
    resp = client.get(
        "/aas/oauth2/authorize",
        params={"client_id": CLIENT_ID, "redirect_uri": REDIRECT_URI},
    )
    assert resp.status_code == 200
    assert "<form" in resp.text


def test_authorize_form_requires_client_and_redirect(client: TestClient) -> None:
    assert client.get("/aas/oauth2/ac").status_code == 400
    assert (
        client.get("/aas/oauth2/ac", params={"client_id": CLIENT_ID}).status_code
        == 400
    )
    assert (
        client.get(
            "/aas/oauth2/ac", params={"redirect_uri": REDIRECT_URI}
        ).status_code
        == 400
    )


def test_authorize_form_escapes_echoed_params(client: TestClient) -> None:
    resp = client.get(
        "/aas/oauth2/ac",
        params={
            "client_id": CLIENT_ID,
            "redirect_uri": REDIRECT_URI,
            "state": '"><script>alert(1)</script>',
        },
    )
    assert resp.status_code == 200
    assert "<script>alert(1)</script>" not in resp.text
    assert "&lt;script&gt;" in resp.text


def test_submit_requires_phone(client: TestClient) -> None:
    resp = client.post(
        "/aas/oauth2/authorize",
        data={"client_id": CLIENT_ID, "redirect_uri": REDIRECT_URI, "state": STATE},
    )
    assert resp.status_code == 400


def test_submit_without_state_omits_it(client: TestClient) -> None:
    resp = client.post(
        "/aas/oauth2/authorize",
        data={"client_id": CLIENT_ID, "redirect_uri": REDIRECT_URI, "phone": PHONE},
    )
    assert resp.status_code == 302
    query = parse_qs(urlparse(resp.headers["location"]).query)
    assert "code" in query
    assert "state" not in query


def test_submit_keeps_existing_query_on_redirect_uri(client: TestClient) -> None:
    resp = client.post(
        "/aas/oauth2/authorize",
        data={
            "client_id": CLIENT_ID,
            "redirect_uri": "https://cb/return?lang=ru",
            "state": "a b&c",
            "phone": PHONE,
        },
    )
    query = parse_qs(urlparse(resp.headers["location"]).query)
    assert query["lang"] == ["ru"]
    assert query["state"] == ["a b&c"]
    assert "code" in query


def test_code_cannot_be_redeemed_twice(client: TestClient) -> None:
    code = authorize(client)
    assert exchange(client, code).status_code == 200

    replay = exchange(client, code)
    assert replay.status_code == 400
    assert replay.json() == {"error": "invalid_grant"}


def test_unknown_code_is_invalid_grant(client: TestClient) -> None:
    resp = exchange(client, "made-up-code")
    assert resp.status_code == 400
    assert resp.json() == {"error": "invalid_grant"}


def test_wrong_client_is_invalid_client(client: TestClient) -> None:
    code = authorize(client)
    resp = exchange(client, code, client_id="client-b")
    assert resp.status_code == 400
    assert resp.json() == {"error": "invalid_client"}

    # The code survives a client mismatch.
    assert exchange(client, code).status_code == 200


def test_unsupported_grant_type(client: TestClient) -> None:
    code = authorize(client)
    resp = client.post(
        "/aas/oauth2/te",
        data={"grant_type": "refresh_token", "code": code, "client_id": CLIENT_ID},
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "unsupported_grant_type"}

    # A rejected grant type does not consume the code.
    assert exchange(client, code).status_code == 200
