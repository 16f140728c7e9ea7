from espetinho.core.config import get_settings
from espetinho.services.auth import (
    FixedCredentialVerifier,
    get_credential_verifier,
    reset_credential_verifier,
)


def test_fixed_verifier():
    verifier = FixedCredentialVerifier("admin", "1234")

    assert verifier.verify("admin", "1234")
    assert not verifier.verify("admin", "12345")
    assert not verifier.verify("root", "1234")


def test_factory_reads_settings(monkeypatch):
    monkeypatch.setenv("ADMIN_USERNAME", "maria")
    monkeypatch.setenv("ADMIN_PASSWORD", "espeto")
    get_settings.cache_clear()
    reset_credential_verifier()
    try:
        verifier = get_credential_verifier()
        assert verifier.verify("maria", "espeto")
        assert not verifier.verify("admin", "1234")
    finally:
        get_settings.cache_clear()
        reset_credential_verifier()


async def test_login_sets_cookie_and_opens_session(client):
    assert (await client.get("/admin/session")).status_code == 401

    login = await client.post("/admin/login", json={"usuario": "admin", "senha": "1234"})

    assert login.status_code == 200
    assert login.cookies.get("auth") == "true"
    assert (await client.get("/admin/session")).status_code == 200


async def test_wrong_password_is_rejected(client):
    login = await client.post("/admin/login", json={"username": "admin", "password": "nope"})

    assert login.status_code == 401
    assert "auth" not in login.cookies


async def test_logout_clears_cookie(client):
    response = await client.get("/admin/logout")

    assert response.status_code == 200
    assert "Max-Age=0" in response.headers["set-cookie"]
