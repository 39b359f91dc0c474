from __future__ import annotations

import html
import logging
from typing import Annotated
from urllib.parse import urlencode

from fastapi import APIRouter, Form, HTTPException, Query, status
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from pydantic import BaseModel

from app.api.dependencies import session_store
from app.services.errors import SessionError

# ---------------------------------------------------------------------------
# ESIA-style authorization server (test double)
#
# Endpoints:
#   GET  /aas/oauth2/ac        : show the phone-number form
#   GET  /aas/oauth2/authorize : same form (alternate path some clients use)
#   POST /aas/oauth2/authorize : form submit: issue code, redirect to client
#   POST /aas/oauth2/te        : exchange code for access/refresh/id tokens
#
# There is no real user authentication: whatever phone number the operator
# types becomes the subject of the issued tokens.
# ---------------------------------------------------------------------------

logger = logging.getLogger(__name__)

router = APIRouter(tags=["oauth"])


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    id_token: str
    expires_in: int
    token_type: str


_AUTHORIZE_HTML = """\
<!DOCTYPE html>
<html lang="ru">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>Вход через Госуслуги</title>
  <style>
    * {{ margin: 0; padding: 0; box-sizing: border-box; }}
    body {{
      font-family: system-ui, -apple-system, sans-serif;
      display: flex; justify-content: center; align-items: center;
      min-height: 100vh; padding: 20px;
      background: linear-gradient(135deg, #0d47a1 0%, #1976d2 100%);
    }}
    .card {{
      background: #fff; padding: 2.5rem; border-radius: 12px;
      box-shadow: 0 10px 40px rgba(0,0,0,.2); max-width: 400px; width: 100%;
    }}
    h1 {{ font-size: 1.5rem; text-align: center; margin-bottom: .5rem; }}
    .subtitle {{ color: #666; text-align: center; font-size: .9rem; margin-bottom: 2rem; }}
    label {{ display: block; font-size: .9rem; margin-bottom: .5rem; }}
    input[type=tel] {{
      width: 100%; padding: .75rem 1rem; margin-bottom: 1.25rem;
      border: 2px solid #e0e0e0; border-radius: 8px; font-size: 1rem;
    }}
    button {{
      width: 100%; padding: .9rem; background: #0d47a1; color: #fff;
      border: none; border-radius: 8px; font-size: 1rem; cursor: pointer;
    }}
    button:hover {{ background: #1976d2; }}
    .info {{
      margin-top: 1.25rem; padding: .75rem; background: #e3f2fd;
      border-radius: 8px; font-size: .8rem; color: #0d47a1; text-align: center;
    }}
  </style>
</head>
<body>
  <div class="card">
    <h1>Вход через Госуслуги</h1>
    <p class="subtitle">Введите номер телефона для авторизации</p>
    <form method="post" action="/aas/oauth2/authorize">
      <input type="hidden" name="client_id" value="{client_id}">
      <input type="hidden" name="redirect_uri" value="{redirect_uri}">
      <input type="hidden" name="state" value="{state}">
      <input type="hidden" name="scope" value="{scope}">
      <input type="hidden" name="response_type" value="{response_type}">
      <label for="phone-display">Номер телефона</label>
      <input id="phone-display" type="tel" placeholder="+7 (999) 123-45-67"
             autocomplete="tel" required autofocus>
      <input id="phone" type="hidden" name="phone">
      <button type="submit">Продолжить</button>
      <div class="info">Тестовая среда ЕСИА<br>Введите любой номер телефона</div>
    </form>
  </div>
  <script>
    const display = document.getElementById("phone-display");
    const phone = document.getElementById("phone");
    display.addEventListener("input", (e) => {{
      const d = e.target.value.replace(/\\D/g, "").slice(0, 11);
      let out = d.length ? "+7" : "";
      if (d.length > 1) out += " (" + d.slice(1, 4);
      if (d.length >= 4) out += ") " + d.slice(4, 7);
      if (d.length >= 7) out += "-" + d.slice(7, 9);
      if (d.length >= 9) out += "-" + d.slice(9, 11);
      e.target.value = out;
    }});
    document.querySelector("form").addEventListener("submit", (e) => {{
      const digits = display.value.replace(/\\D/g, "");
      if (digits.length !== 11) {{
        e.preventDefault();
        alert("Пожалуйста, введите полный номер телефона");
        return;
      }}
      phone.value = digits;
    }});
  </script>
</body>
</html>
"""


def _oauth_error(error: str) -> JSONResponse:
    return JSONResponse({"error": error}, status_code=status.HTTP_400_BAD_REQUEST)


def _with_query(uri: str, params: dict[str, str]) -> str:
    sep = "&" if "?" in uri else "?"
    return f"{uri}{sep}{urlencode(params)}"


# ========================== GET /aas/oauth2/ac ============================
# The client sends the user's browser here.  We render a form asking for a
# phone number; everything the client sent rides along in hidden fields.


@router.get("/aas/oauth2/ac")
@router.get("/aas/oauth2/authorize")
def authorize_page(
    client_id: Annotated[str, Query()] = "",
    redirect_uri: Annotated[str, Query()] = "",
    state: Annotated[str, Query()] = "",
    scope: Annotated[str, Query()] = "",
    response_type: Annotated[str, Query()] = "",
) -> HTMLResponse:
    logger.info(
        "ESIA FLOW [authorize] form requested  client_id=%s redirect_uri=%s scope=%s",
        client_id,
        redirect_uri,
        scope,
    )
    if not client_id or not redirect_uri:
        logger.warning("ESIA FLOW [authorize] FAIL: client_id or redirect_uri missing")
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "invalid_request")

    page = _AUTHORIZE_HTML.format(
        client_id=html.escape(client_id, quote=True),
        redirect_uri=html.escape(redirect_uri, quote=True),
        state=html.escape(state, quote=True),
        scope=html.escape(scope, quote=True),
        response_type=html.escape(response_type, quote=True),
    )
    return HTMLResponse(page)


# ========================== POST /aas/oauth2/authorize ====================


@router.post("/aas/oauth2/authorize")
def authorize_submit(
    client_id: Annotated[str, Form()] = "",
    redirect_uri: Annotated[str, Form()] = "",
    state: Annotated[str, Form()] = "",
    phone: Annotated[str, Form()] = "",
) -> RedirectResponse:
    phone = phone.strip()
    logger.info("ESIA FLOW [authorize] form submitted  client_id=%s", client_id)

    if not client_id or not redirect_uri or not phone:
        logger.warning("ESIA FLOW [authorize] FAIL: required form field missing")
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "invalid_request")

    code = session_store.issue_code(client_id, redirect_uri, state, phone)

    params = {"code": code}
    if state:
        params["state"] = state
    logger.info("ESIA FLOW [authorize] redirecting to client  uri=%s", redirect_uri)
    return RedirectResponse(
        url=_with_query(redirect_uri, params), status_code=status.HTTP_302_FOUND
    )


# ========================== POST /aas/oauth2/te ===========================
# Errors use the OAuth JSON shape {"error": "..."} rather than FastAPI's
# {"detail": ...}, since client libraries parse that field.


@router.post("/aas/oauth2/te", response_model=None)
def exchange_token(
    grant_type: Annotated[str, Form()] = "",
    code: Annotated[str, Form()] = "",
    client_id: Annotated[str, Form()] = "",
    redirect_uri: Annotated[str, Form()] = "",
) -> TokenResponse | JSONResponse:
    # redirect_uri is accepted for client compatibility but not compared.
    logger.info(
        "ESIA FLOW [token] exchange requested  client_id=%s grant_type=%s",
        client_id,
        grant_type,
    )

    if grant_type != "authorization_code":
        logger.warning("ESIA FLOW [token] FAIL: unsupported grant_type=%s", grant_type)
        return _oauth_error("unsupported_grant_type")

    try:
        token = session_store.redeem_code(code, client_id)
    except SessionError as e:
        logger.warning("ESIA FLOW [token] FAIL: %s (%s)", e.error_code, e)
        return _oauth_error(e.error_code)

    return TokenResponse(
        access_token=token.access_token,
        refresh_token=token.refresh_token,
        id_token=token.id_token,
        expires_in=token.expires_in,
        token_type=token.token_type,
    )
