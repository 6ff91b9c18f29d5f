from datetime import timedelta

from domain.membership import RoleFlag
from shared.codes import BusinessCode


def test_create_team_makes_creator_owner(client, store, auth_headers):
    resp = client.post("/api/v1/teams", json={"name": "Design"}, headers=auth_headers("alice"))
    assert resp.status_code == 201
    body = resp.json()
    assert body["code"] == 0
    team_id = body["data"]["id"]
    assert store.team_members[(team_id, "alice")].role_flags == RoleFlag.OWNER


def test_routes_require_token(client):
    resp = client.get("/api/v1/teams/t1/members")
    assert resp.status_code == 401
    assert resp.json()["error"]["type"] == "HTTPError"


def test_expired_token_is_rejected(client, store, make_token):
    store.add_team("t1", {"alice": 8})
    token = make_token("alice", expires_delta=timedelta(seconds=-5))

    resp = client.get("/api/v1/teams/t1/members", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 401
    assert resp.json()["code"] == BusinessCode.TOKEN_EXPIRED
    assert resp.headers["WWW-Authenticate"] == "Bearer"


def test_list_members_needs_membership(client, store, auth_headers):
    store.add_team("t1", {"alice": 8, "bob": 1})

    ok = client.get("/api/v1/teams/t1/members", headers=auth_headers("bob"))
    assert ok.status_code == 200
    assert {m["user_id"]: m["role_name"] for m in ok.json()["data"]} == {"alice": "Owner", "bob": "Viewer"}

    denied = client.get("/api/v1/teams/t1/members", headers=auth_headers("mallory"))
    assert denied.status_code == 403
    assert denied.json()["error"]["type"] == "AccessForbidden"


def test_add_member_defaults_to_viewer(client, store, auth_headers):
    store.add_team("t1", {"admin": 4})
    resp = client.post(
        "/api/v1/teams/t1/members",
        json={"user_id": "carol"},
        headers=auth_headers("admin"),
    )
    assert resp.status_code == 201
    assert resp.json()["data"]["role_flags"] == 1
    assert store.team_members[("t1", "carol")].invited_by == "admin"

    dup = client.post("/api/v1/teams/t1/members", json={"user_id": "carol"}, headers=auth_headers("admin"))
    assert dup.status_code == 409


def test_editor_cannot_change_roles(client, store, auth_headers):
    store.add_team("t1", {"editor": 2, "viewer": 1})
    resp = client.put(
        "/api/v1/teams/t1/members/viewer",
        json={"role_flags": 2},
        headers=auth_headers("editor"),
    )
    assert resp.status_code == 403
    assert resp.json()["error"]["type"] == "InsufficientPermission"
    assert store.team_members[("t1", "viewer")].role_flags == 1


def test_admin_updates_and_removes_member(client, store, auth_headers):
    store.add_team("t1", {"admin": 4, "bob": 1})
    resp = client.put("/api/v1/teams/t1/members/bob", json={"role_flags": 2}, headers=auth_headers("admin"))
    assert resp.status_code == 200
    assert resp.json()["data"] == {"user_id": "bob", "role_flags": 2, "role_name": "Editor"}

    resp = client.delete("/api/v1/teams/t1/members/bob", headers=auth_headers("admin"))
    assert resp.status_code == 200
    assert ("t1", "bob") not in store.team_members

    missing = client.delete("/api/v1/teams/t1/members/bob", headers=auth_headers("admin"))
    assert missing.status_code == 404


def test_only_owner_deletes_team(client, store, auth_headers):
    store.add_team("t1", {"owner": 8, "admin": 4})
    assert client.delete("/api/v1/teams/t1", headers=auth_headers("admin")).status_code == 403

    resp = client.delete("/api/v1/teams/t1", headers=auth_headers("owner"))
    assert resp.status_code == 200
    assert "t1" not in store.teams
    assert not [k for k in store.team_members if k[0] == "t1"]


def test_team_project_requires_editor(client, store, auth_headers):
    store.add_team("t1", {"viewer": 1, "editor": 2})
    denied = client.post("/api/v1/teams/t1/projects", json={"name": "P"}, headers=auth_headers("viewer"))
    assert denied.status_code == 403

    resp = client.post("/api/v1/teams/t1/projects", json={"name": "P"}, headers=auth_headers("editor"))
    assert resp.status_code == 201
    assert resp.json()["data"]["team_id"] == "t1"


def test_personal_project_lifecycle(client, store, auth_headers):
    resp = client.post("/api/v1/projects", json={"name": "Notes"}, headers=auth_headers("alice"))
    assert resp.status_code == 201
    project_id = resp.json()["data"]["id"]
    assert resp.json()["data"]["team_id"] is None

    # 个人项目没有团队兜底
    assert client.get(f"/api/v1/projects/{project_id}/members", headers=auth_headers("bob")).status_code == 403

    added = client.post(
        f"/api/v1/projects/{project_id}/members",
        json={"user_id": "bob", "role_flags": 2},
        headers=auth_headers("alice"),
    )
    assert added.status_code == 201
    members = client.get(f"/api/v1/projects/{project_id}/members", headers=auth_headers("bob")).json()["data"]
    assert {m["user_id"] for m in members} == {"alice", "bob"}

    assert client.delete(f"/api/v1/projects/{project_id}", headers=auth_headers("bob")).status_code == 403
    assert client.delete(f"/api/v1/projects/{project_id}", headers=auth_headers("alice")).status_code == 200
    assert project_id not in store.projects
    assert not [k for k in store.project_members if k[0] == project_id]


def test_validation_error_envelope(client, auth_headers):
    resp = client.post("/api/v1/teams", json={}, headers=auth_headers("alice"))
    assert resp.status_code == 422
    body = resp.json()
    assert body["error"]["type"] == "ValidationError"
    assert body["error"]["field"] == "name"


def test_archive_toggles_and_needs_admin(client, store, auth_headers):
    store.add_team("t1", {"admin": 4, "editor": 2})
    store.add_project("p1", team_id="t1")

    denied = client.put("/api/v1/projects/p1/archive", headers=auth_headers("editor"))
    assert denied.status_code == 403
    assert store.projects["p1"].is_archived is False

    first = client.put("/api/v1/projects/p1/archive", headers=auth_headers("admin"))
    assert first.status_code == 200
    assert first.json()["data"] == {"id": "p1", "is_archived": True}
    assert store.projects["p1"].is_archived is True

    second = client.put("/api/v1/projects/p1/archive", headers=auth_headers("admin"))
    assert second.json()["data"]["is_archived"] is False


def test_archive_unknown_project_is_forbidden(client, auth_headers):
    resp = client.put("/api/v1/projects/missing/archive", headers=auth_headers("admin"))
    assert resp.status_code == 403
