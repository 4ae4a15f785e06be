"""
Tests for the aiohttp bindings: session cookie, require_auth and the
setup, login and logout handlers.
"""
import orjson
import pytest
from aiohttp import web
from aiohttp.test_utils import TestClient, TestServer, make_mocked_request
from yarl import URL

from account_vault.web import (
    VAULT_CONFIG,
    VAULT_GATE,
    add_vault_routes,
    clear_session_cookie,
    error_body,
    logout,
    require_auth,
    set_session_cookie,
    setup_vault,
)

PASSWORD = "correcthorsebattery"


@pytest.fixture
def app(config, store) -> web.Application:
    application = web.Application()
    setup_vault(application, config, store)
    return application


def _request(app, token=None):
    headers = {"Cookie": f"gav_session={token}"} if token else {}
    return make_mocked_request("GET", "/api/accounts", headers=headers, app=app)


class TestSetup:
    def test_setup_attaches_gate(self, app, config):
        assert app[VAULT_CONFIG] is config
        assert app[VAULT_GATE].max_age == config.session_max_age


class TestSessionCookie:
    """Cookie attributes for issuing and clearing sessions."""

    def test_set_cookie(self, config):
        response = web.Response()
        set_session_cookie(response, "tok.sig", config)
        morsel = response.cookies["gav_session"]
        assert morsel.value == "tok.sig"
        assert morsel["httponly"] is True
        assert morsel["samesite"] == "Lax"
        assert morsel["path"] == "/"
        assert morsel["max-age"] == str(config.session_max_age)
        assert not morsel["secure"]

    def test_secure_in_production(self, key):
        from account_vault.vault.config import VaultConfig

        config = VaultConfig(
            encryption_key=key, signing_secret="prod-secret", cookie_secure=True,
        )
        response = web.Response()
        set_session_cookie(response, "tok.sig", config)
        assert response.cookies["gav_session"]["secure"] is True

    def test_clear_cookie(self, config):
        response = web.Response()
        clear_session_cookie(response, config)
        morsel = response.cookies["gav_session"]
        assert morsel.value == ""
        assert morsel["max-age"] == "0"


class TestRequireAuth:
    """401 responses with JSON error bodies."""

    @pytest.mark.asyncio
    async def test_not_initialized(self, app):
        # same answer as a bad token: callers cannot tell setup state apart
        with pytest.raises(web.HTTPUnauthorized) as exc:
            await require_auth(_request(app))
        body = orjson.loads(exc.value.text)
        assert body == {
            "ok": False,
            "error": {
                "code": "UNAUTHORIZED",
                "message": "Unauthorized.",
            },
        }
        assert exc.value.content_type == "application/json"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", [None, "garbage", "abc.def"])
    async def test_unauthorized(self, app, token):
        await app[VAULT_GATE].initialize(PASSWORD)
        with pytest.raises(web.HTTPUnauthorized) as exc:
            await require_auth(_request(app, token))
        assert orjson.loads(exc.value.text)["error"]["code"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_authorized(self, app):
        token = await app[VAULT_GATE].initialize(PASSWORD)
        credential = await require_auth(_request(app, token))
        assert credential.id == 1


async def _post(app, path, password=None, token=None):
    """POST a login/setup form; return (status, location, session cookie)."""
    headers = {"Cookie": f"gav_session={token}"} if token else {}
    data = {} if password is None else {"password": password}
    async with TestClient(TestServer(app)) as client:
        resp = await client.post(
            path, data=data, headers=headers, allow_redirects=False,
        )
        cookie = resp.cookies.get("gav_session")
        return resp.status, resp.headers["Location"], cookie


class TestFormHandlers:
    """Setup and login forms answer with redirects and set the cookie."""

    @pytest.fixture
    def routed(self, app):
        add_vault_routes(app)
        return app

    @pytest.mark.asyncio
    async def test_setup_logs_in(self, routed):
        status, location, cookie = await _post(routed, "/setup", f"  {PASSWORD} ")
        assert status == 302
        assert location == "/"
        credential = await routed[VAULT_GATE].authorize(cookie.value)
        assert credential is not None
        assert cookie["httponly"] is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("password", [None, "", "short", "       7"])
    async def test_setup_weak_password(self, routed, password):
        status, location, cookie = await _post(routed, "/setup", password)
        assert status == 302
        url = URL(location)
        assert url.path == "/setup"
        assert url.query["error"] == "Password must be at least 8 characters"
        assert cookie is None
        assert not await routed[VAULT_GATE].is_initialized()

    @pytest.mark.asyncio
    async def test_setup_when_initialized(self, routed):
        token = await routed[VAULT_GATE].initialize(PASSWORD)
        _, location, cookie = await _post(routed, "/setup", "another-password")
        assert location == "/login"
        assert cookie is None
        _, location, _ = await _post(routed, "/setup", "another-password", token)
        assert location == "/"

    @pytest.mark.asyncio
    async def test_login_before_setup(self, routed):
        _, location, cookie = await _post(routed, "/login", PASSWORD)
        assert location == "/setup"
        assert cookie is None

    @pytest.mark.asyncio
    async def test_login(self, routed):
        await routed[VAULT_GATE].initialize(PASSWORD)
        status, location, cookie = await _post(routed, "/login", PASSWORD)
        assert status == 302
        assert location == "/"
        credential = await routed[VAULT_GATE].authorize(cookie.value)
        assert credential.id == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("password", [None, "", "wrong-password", f" {PASSWORD}"])
    async def test_login_invalid_password(self, routed, password):
        await routed[VAULT_GATE].initialize(PASSWORD)
        _, location, cookie = await _post(routed, "/login", password)
        url = URL(location)
        assert url.path == "/login"
        assert url.query["error"] == "Invalid password"
        assert cookie is None

    @pytest.mark.asyncio
    async def test_login_when_logged_in(self, routed):
        token = await routed[VAULT_GATE].initialize(PASSWORD)
        _, location, cookie = await _post(routed, "/login", "wrong-password", token)
        assert location == "/"
        assert cookie is None

    @pytest.mark.asyncio
    async def test_logout_route(self, routed):
        token = await routed[VAULT_GATE].initialize(PASSWORD)
        _, location, cookie = await _post(routed, "/logout", token=token)
        assert location == "/login"
        assert cookie.value == ""


class TestLogout:
    """Logout clears the cookie and redirects."""

    @pytest.mark.asyncio
    async def test_redirect_to_setup_when_uninitialized(self, app):
        with pytest.raises(web.HTTPFound) as exc:
            await logout(_request(app))
        assert exc.value.location == "/setup"
        assert exc.value.cookies["gav_session"]["max-age"] == "0"

    @pytest.mark.asyncio
    async def test_redirect_to_login(self, app):
        token = await app[VAULT_GATE].initialize(PASSWORD)
        with pytest.raises(web.HTTPFound) as exc:
            await logout(_request(app, token))
        assert exc.value.location == "/login"
        assert exc.value.cookies["gav_session"].value == ""


def test_error_body_is_json():
    assert orjson.loads(error_body("X", "y")) == {
        "ok": False, "error": {"code": "X", "message": "y"},
    }
