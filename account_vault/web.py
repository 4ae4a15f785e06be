"""
aiohttp bindings for the vault gate.

The session token travels in an HTTP-only cookie. Protected handlers
call :func:`require_auth` first; on failure it raises 401 with a JSON
body ``{"ok": false, "error": {"code": "UNAUTHORIZED", ...}}``. The
setup, login and logout form handlers always answer with a redirect.
"""
import logging

import orjson
from aiohttp import web

from .exceptions import AlreadyInitializedError, WeakPasswordError
from .vault.config import VaultConfig
from .vault.gate import VaultAuthGate
from .vault.store import CredentialStore, MasterCredential

logger = logging.getLogger("vault")

VAULT_GATE = web.AppKey("vault_gate", VaultAuthGate)
VAULT_CONFIG = web.AppKey("vault_config", VaultConfig)

SETUP_WEAK_PASSWORD = "/setup?error=Password%20must%20be%20at%20least%208%20characters"
LOGIN_INVALID_PASSWORD = "/login?error=Invalid%20password"


def setup_vault(
    app: web.Application,
    config: VaultConfig,
    store: CredentialStore,
) -> VaultAuthGate:
    """Attach a gate built from config to the application."""
    gate = VaultAuthGate.from_config(config, store)
    app[VAULT_CONFIG] = config
    app[VAULT_GATE] = gate
    return gate


def error_body(code: str, message: str) -> str:
    return orjson.dumps(
        {"ok": False, "error": {"code": code, "message": message}}
    ).decode("utf-8")


def set_session_cookie(
    response: web.StreamResponse,
    token: str,
    config: VaultConfig,
) -> None:
    response.set_cookie(
        config.cookie_name,
        token,
        max_age=config.session_max_age,
        path="/",
        httponly=True,
        samesite="Lax",
        secure=config.cookie_secure,
    )


def clear_session_cookie(
    response: web.StreamResponse,
    config: VaultConfig,
) -> None:
    response.set_cookie(
        config.cookie_name,
        "",
        max_age=0,
        path="/",
        httponly=True,
        samesite="Lax",
        secure=config.cookie_secure,
    )


def session_token(request: web.Request) -> str | None:
    return request.cookies.get(request.app[VAULT_CONFIG].cookie_name)


async def require_auth(request: web.Request) -> MasterCredential:
    """Return the authorized credential holder or raise 401.

    Raises:
        web.HTTPUnauthorized: ``UNAUTHORIZED`` for every failure,
            including requests made before setup.
    """
    gate = request.app[VAULT_GATE]
    credential = await gate.authorize(session_token(request))
    if credential is None:
        raise web.HTTPUnauthorized(
            text=error_body("UNAUTHORIZED", "Unauthorized."),
            content_type="application/json",
        )
    return credential


def _redirect_with_session(request: web.Request, token: str) -> web.HTTPFound:
    response = web.HTTPFound("/")
    set_session_cookie(response, token, request.app[VAULT_CONFIG])
    return response


async def setup(request: web.Request):
    """Create the credential holder from the posted password and log in.

    Always answers with a redirect: ``/`` on success, ``/login`` once the
    vault is initialized, ``/setup?error=...`` for a weak password.
    """
    gate = request.app[VAULT_GATE]
    state = await gate.state(session_token(request))
    if state.initialized:
        raise web.HTTPFound("/" if state.logged_in else "/login")
    data = await request.post()
    password = str(data.get("password", ""))
    try:
        token = await gate.initialize(password)
    except WeakPasswordError:
        raise web.HTTPFound(SETUP_WEAK_PASSWORD)
    except AlreadyInitializedError:
        logger.info("Setup raced with another request; sending to login")
        raise web.HTTPFound("/login")
    raise _redirect_with_session(request, token)


async def login(request: web.Request):
    """Check the posted password and set the session cookie.

    Redirects to ``/setup`` before initialization, to ``/`` when already
    logged in or on success, and to ``/login?error=...`` otherwise.
    """
    gate = request.app[VAULT_GATE]
    state = await gate.state(session_token(request))
    if not state.initialized:
        raise web.HTTPFound("/setup")
    if state.logged_in:
        raise web.HTTPFound("/")
    data = await request.post()
    token = await gate.login(str(data.get("password", "")))
    if token is None:
        raise web.HTTPFound(LOGIN_INVALID_PASSWORD)
    raise _redirect_with_session(request, token)


async def logout(request: web.Request):
    """Clear the session cookie and send the browser to login or setup."""
    gate = request.app[VAULT_GATE]
    gate.logout()
    location = "/login" if await gate.is_initialized() else "/setup"
    response = web.HTTPFound(location)
    clear_session_cookie(response, request.app[VAULT_CONFIG])
    raise response


def add_vault_routes(app: web.Application) -> None:
    app.router.add_post("/setup", setup)
    app.router.add_post("/login", login)
    app.router.add_post("/logout", logout)
