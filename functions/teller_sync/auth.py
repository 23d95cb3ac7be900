import base64
import binascii
import hmac

try:  # pragma: no cover
    from .config import get_admin_credentials
    from .errors import AuthError
except Exception:  # pragma: no cover
    from config import get_admin_credentials
    from errors import AuthError

ADMIN_REALM = 'Basic realm="Admin"'


def check_admin_auth(authz: str | None) -> str:
    """Validate an HTTP Basic `Authorization` header for /admin; returns the user."""
    if not authz or not authz.startswith("Basic "):
        raise AuthError(401, "Authentication required", challenge=ADMIN_REALM)

    encoded = authz.split(" ", 1)[1].strip()
    try:
        decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, ValueError):
        raise AuthError(400, "Bad Authorization header")

    user, _, password = decoded.partition(":")
    expected_user, expected_pass = get_admin_credentials()
    user_ok = hmac.compare_digest(user.encode("utf-8"), expected_user.encode("utf-8"))
    pass_ok = hmac.compare_digest(password.encode("utf-8"), expected_pass.encode("utf-8"))
    if not (user_ok and pass_ok):
        raise AuthError(403, "Forbidden")
    return user
