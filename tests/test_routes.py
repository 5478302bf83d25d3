import logging

from tests.conftest import ADMIN_ID, CATEGORY_C, CATEGORY_D, GUILD_G, ROLE_111, USER_ID


def test_health_endpoint(client) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_me_requires_login(client) -> None:
    response = client.get("/api/v1/auth/me")
    assert response.status_code == 401
    assert response.json() == {"detail": "Not authenticated"}


def test_me_returns_session_user(client, login) -> None:
    login(USER_ID)
    response = client.get("/api/v1/auth/me")
    assert response.status_code == 200
    assert response.json()["id"] == USER_ID
    assert response.json()["is_admin"] is False


def test_corrupted_session_is_server_error_and_cleared(client, login) -> None:
    login("not-a-snowflake")
    response = client.get("/api/v1/auth/me")
    assert response.status_code == 500
    assert client.get("/api/v1/auth/me").status_code == 401


def test_corrupted_session_is_logged_once(client, login, caplog) -> None:
    login("not-a-snowflake")
    caplog.clear()
    with caplog.at_level(logging.WARNING):
        client.get("/api/v1/auth/me")
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "corrupted session" in warnings[0].getMessage()


def test_ghost_session_is_unauthenticated(client, login) -> None:
    login(31337)
    assert client.get("/api/v1/auth/me").status_code == 401


def test_logout_clears_session(client, login) -> None:
    login(USER_ID)
    assert client.post("/api/v1/auth/logout").status_code == 200
    assert client.get("/api/v1/auth/me").status_code == 401


def test_category_access_reports_effective_capability(client, login) -> None:
    login(USER_ID)
    response = client.get(f"/api/v1/guilds/{GUILD_G}/categories/{CATEGORY_C}/access")
    assert response.status_code == 200
    assert response.json() == {"can_view": True, "can_create": True, "can_manage": False}


def test_category_access_denied_hides_reason(client, login) -> None:
    login(USER_ID)
    response = client.get(f"/api/v1/guilds/{GUILD_G}/categories/{CATEGORY_D}/access")
    assert response.status_code == 403
    assert response.json() == {"detail": "Insufficient permissions"}


def test_manageable_categories_route(client, login) -> None:
    login(USER_ID)
    response = client.get(f"/api/v1/user/guilds/{GUILD_G}/manageable-categories")
    assert response.status_code == 200
    assert [c["id"] for c in response.json()] == [CATEGORY_C]


def test_manageable_categories_for_admin(client, login) -> None:
    login(ADMIN_ID)
    response = client.get(f"/api/v1/user/guilds/{GUILD_G}/manageable-categories")
    assert [c["name"] for c in response.json()] == ["Doctrine Ops", "Roams"]


def test_user_guilds(client, login) -> None:
    login(USER_ID)
    response = client.get("/api/v1/user/guilds")
    assert response.json() == {"user_id": USER_ID, "guild_ids": [GUILD_G]}


def test_grant_administration_requires_admin(client, login) -> None:
    login(USER_ID)
    response = client.put(
        f"/api/v1/guilds/{GUILD_G}/categories/{CATEGORY_D}/access-roles/{ROLE_111}",
        json={"can_view": True, "can_create": True, "can_manage": True},
    )
    assert response.status_code == 403


def test_second_grant_for_same_pair_overwrites(client, login, supabase) -> None:
    login(ADMIN_ID)
    url = f"/api/v1/guilds/{GUILD_G}/categories/{CATEGORY_C}/access-roles/{ROLE_111}"
    response = client.put(url, json={"can_view": True, "can_create": False, "can_manage": True})
    assert response.status_code == 200

    grants = client.get(f"/api/v1/guilds/{GUILD_G}/categories/{CATEGORY_C}/access-roles").json()
    assert grants == [{
        "category_id": CATEGORY_C, "role_id": ROLE_111,
        "can_view": True, "can_create": False, "can_manage": True,
    }]
    assert len(supabase.tables["category_access_grants"]) == 1


def test_grant_for_role_outside_guild_is_rejected(client, login) -> None:
    login(ADMIN_ID)
    response = client.put(
        f"/api/v1/guilds/{GUILD_G}/categories/{CATEGORY_C}/access-roles/333",
        json={"can_view": True},
    )
    assert response.status_code == 404


def test_grant_on_category_in_other_guild_is_not_found(client, login) -> None:
    login(ADMIN_ID)
    response = client.get(f"/api/v1/guilds/{GUILD_G}/categories/3/access-roles")
    assert response.status_code == 404


def test_deleting_grant_revokes_access(client, login) -> None:
    login(ADMIN_ID)
    url = f"/api/v1/guilds/{GUILD_G}/categories/{CATEGORY_C}/access-roles/{ROLE_111}"
    assert client.delete(url).status_code == 204
    assert client.delete(url).status_code == 404

    login(USER_ID)
    response = client.get(f"/api/v1/guilds/{GUILD_G}/categories/{CATEGORY_C}/access")
    assert response.status_code == 403


def test_admin_can_promote_user(client, login) -> None:
    login(ADMIN_ID)
    response = client.post(f"/api/v1/admin/users/{USER_ID}/admin", json={"is_admin": True})
    assert response.status_code == 200
    assert response.json()["is_admin"] is True

    admins = client.get("/api/v1/admin/users").json()
    assert sorted(a["id"] for a in admins) == [ADMIN_ID, USER_ID]


def test_promoting_unknown_user_is_not_found(client, login) -> None:
    login(ADMIN_ID)
    response = client.post("/api/v1/admin/users/4242/admin", json={"is_admin": True})
    assert response.status_code == 404


def test_non_admin_cannot_list_admins(client, login) -> None:
    login(USER_ID)
    assert client.get("/api/v1/admin/users").status_code == 403
