"""Demo: walk the ESIA login flow using FastAPI TestClient.

Run with:
    python scripts/demo_login_flow.py [phone]
"""

from __future__ import annotations

import sys
from urllib.parse import parse_qs, urlparse

from fastapi.testclient import TestClient

from app.main import app

CLIENT_ID = "demo-client"
REDIRECT_URI = "http://localhost/callback"


def main(phone: str) -> None:
    client = TestClient(app, follow_redirects=False)

    # ── Step 1: GET /aas/oauth2/ac ──────────────────────────────────
    r = client.get(
        "/aas/oauth2/ac",
        params={
            "client_id": CLIENT_ID,
            "redirect_uri": REDIRECT_URI,
            "scope": "openid fullname",
            "response_type": "code",
            "state": "demo-state",
        },
    )
    print(f"1. GET  /aas/oauth2/ac        → {r.status_code}  (phone form HTML)")

    # ── Step 2: POST /aas/oauth2/authorize ──────────────────────────
    r = client.post(
        "/aas/oauth2/authorize",
        data={
            "client_id": CLIENT_ID,
            "redirect_uri": REDIRECT_URI,
            "state": "demo-state",
            "phone": phone,
        },
    )
    query = parse_qs(urlparse(r.headers["location"]).query)
    code = query["code"][0]
    print(
        f"2. POST /aas/oauth2/authorize → {r.status_code}  "
        f"code={code[:12]}…  state={query.get('state', [''])[0]}"
    )

    # ── Step 3: POST /aas/oauth2/te ─────────────────────────────────
    form = {
        "grant_type": "authorization_code",
        "code": code,
        "client_id": CLIENT_ID,
        "redirect_uri": REDIRECT_URI,
    }
    r = client.post("/aas/oauth2/te", data=form)
    token_data = r.json()
    access_token = token_data["access_token"]
    print(
        f"3. POST /aas/oauth2/te        → {r.status_code}  "
        f"token={access_token[:20]}…  expires_in={token_data['expires_in']}s"
    )

    # ── Step 4: GET /userinfo ───────────────────────────────────────
    r = client.get("/userinfo", headers={"Authorization": f"Bearer {access_token}"})
    person = r.json()
    print(
        f"4. GET  /userinfo (bearer)    → {r.status_code}  "
        f"{person['lastName']} {person['firstName']} {person['middleName']}, "
        f"oid={person['oid']}"
    )

    # ── Step 5: replay the code ─────────────────────────────────────
    r = client.post("/aas/oauth2/te", data=form)
    print(f"5. POST /aas/oauth2/te (replay) → {r.status_code}  {r.json()['error']}")

    print("\nAll steps completed.")


if __name__ == "__main__":
    main(sys.argv[1] if len(sys.argv) > 1 else "79990000001")
