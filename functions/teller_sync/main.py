import json
from typing import Any, Dict

import functions_framework
from flask import Response, make_response
from loguru import logger
from pydantic import ValidationError as PydanticValidationError

# Support both "run as a package" (relative imports) and "run from this folder" (local imports).
try:  # pragma: no cover
    from .auth import check_admin_auth
    from .config import get_cors_origin, sentry_dsn, uses_default_admin_credentials
    from .errors import AuthError, RelayError, ValidationError
    from .models import SyncRequest
    from .render import render_admin_page
    from .serialization import sync_record_to_dict
    from .store import get_store
    from .sync import sync_accounts
except Exception:  # pragma: no cover
    from auth import check_admin_auth
    from config import get_cors_origin, sentry_dsn, uses_default_admin_credentials
    from errors import AuthError, RelayError, ValidationError
    from models import SyncRequest
    from render import render_admin_page
    from serialization import sync_record_to_dict
    from store import get_store
    from sync import sync_accounts

SYNC_PATH = "/api/teller/sync"
ADMIN_PATH = "/admin"


def _init_sentry() -> None:
    dsn = sentry_dsn()
    if not dsn:
        return
    try:
        import sentry_sdk

        sentry_sdk.init(dsn=dsn, send_default_pii=False, traces_sample_rate=0.0)
    except Exception:
        # Never fail the function due to Sentry init issues.
        return


_init_sentry()

if uses_default_admin_credentials():
    logger.warning("ADMIN_USER/ADMIN_PASS not set, /admin uses the default credentials")


def _with_cors(resp: Response) -> Response:
    resp.headers["Access-Control-Allow-Origin"] = get_cors_origin()
    resp.headers["Access-Control-Allow-Methods"] = "POST, OPTIONS, GET"
    resp.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"
    return resp


def _json_response(payload: Any, status: int = 200) -> Response:
    resp = make_response(json.dumps(payload, ensure_ascii=False), status)
    resp.headers["Content-Type"] = "application/json; charset=utf-8"
    return _with_cors(resp)


def _text_response(text: str, status: int, headers: Dict[str, str] | None = None) -> Response:
    resp = make_response(text, status)
    resp.headers["Content-Type"] = "text/plain; charset=utf-8"
    for k, v in (headers or {}).items():
        resp.headers[k] = v
    return _with_cors(resp)


def _error(message: str, status: int = 500) -> Response:
    return _json_response({"error": message}, status=status)


def _read_sync_token(request) -> str | None:
    raw = request.get_data(as_text=True) or ""
    try:
        payload = json.loads(raw) if raw.strip() else {}
    except ValueError:
        raise RelayError("Invalid JSON body")
    if not isinstance(payload, dict):
        return None
    try:
        return SyncRequest.model_validate(payload).token
    except PydanticValidationError:
        raise ValidationError("access_token must be a string")


def _handle_sync(request) -> Response:
    logger.info(f"Received {SYNC_PATH} request")
    try:
        token = _read_sync_token(request)
        record = sync_accounts(token, store=get_store())
    except RelayError as e:
        logger.warning(f"Sync failed: {e}")
        return _error(str(e), 500)
    except Exception as e:
        logger.exception("Unexpected error during Teller sync")
        return _error(str(e), 500)
    return _json_response(sync_record_to_dict(record))


def _handle_admin(request) -> Response:
    try:
        check_admin_auth(request.headers.get("Authorization"))
    except AuthError as e:
        headers = {"WWW-Authenticate": e.challenge} if e.challenge else None
        return _text_response(str(e), e.status_code, headers)

    html = render_admin_page(get_store().all_records())
    resp = make_response(html, 200)
    resp.headers["Content-Type"] = "text/html; charset=utf-8"
    return _with_cors(resp)


@functions_framework.http
def teller_sync(request):
    """
    Cloud Function HTTP entry point for the Teller sync relay.

    Paths:
      - POST /api/teller/sync   body: {"access_token": "..."} (or "accessToken")
      - GET  /admin             HTTP Basic auth, HTML listing of stored sync records
      - OPTIONS *               CORS preflight
    """
    if request.method == "OPTIONS":
        return _with_cors(make_response("", 204))

    path = request.path or "/"

    if request.method == "POST" and path == SYNC_PATH:
        return _handle_sync(request)

    if request.method == "GET" and path == ADMIN_PATH:
        return _handle_admin(request)

    return _text_response("Not Found", 404)
