from datetime import datetime, timedelta, UTC

from conftest import auth
from models.sharing import ShareLink

def create_link(client, set_id, user_id="alice", **body):
    response = client.post(f"/api/sets/{set_id}/share", json=body or None, headers=auth(user_id))
    assert response.status_code == 200, response.text
    return response.json()

def test_create_share_link(client, make_user, make_set):
    make_user("alice")
    flashcard_set = make_set("alice")

    link = create_link(client, flashcard_set.id)
    assert len(link["share_token"]) == 32
    assert link["share_url"] == f"http://localhost:3000/shared/{link['share_token']}"
    assert link["is_active"] is True
    assert link["expires_at"] is None

def test_tokens_are_unique(client, make_user, make_set):
    make_user("alice")
    flashcard_set = make_set("alice")
    tokens = {create_link(client, flashcard_set.id)["share_token"] for _ in range(5)}
    assert len(tokens) == 5

def test_viewer_cannot_create_link_but_editor_can(client, make_user, make_set, grant):
    make_user("alice")
    make_user("bob")
    make_user("carol")
    flashcard_set = make_set("alice")
    grant(flashcard_set.id, "bob", "viewer")
    grant(flashcard_set.id, "carol", "editor")

    denied = client.post(f"/api/sets/{flashcard_set.id}/share", headers=auth("bob"))
    assert denied.status_code == 403
    create_link(client, flashcard_set.id, "carol")

def test_shared_private_set_is_readable_anonymously(client, make_user, make_set):
    make_user("alice")
    flashcard_set = make_set("alice", cards=[("Term", "Description")])
    link = create_link(client, flashcard_set.id)

    response = client.get(f"/api/shared/{link['share_token']}")
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == flashcard_set.id
    assert data["user_access"] == "public"
    assert data["is_shared"] is True
    assert data["creator_username"] == "alice"
    assert [card["term"] for card in data["flashcards"]] == ["Term"]

def test_shared_set_reports_member_access(client, make_user, make_set, grant):
    make_user("alice")
    make_user("bob")
    flashcard_set = make_set("alice")
    grant(flashcard_set.id, "bob", "editor")
    token = create_link(client, flashcard_set.id)["share_token"]

    assert client.get(f"/api/shared/{token}", headers=auth("alice")).json()["user_access"] == "owner"
    assert client.get(f"/api/shared/{token}", headers=auth("bob")).json()["user_access"] == "editor"
    assert client.get(f"/api/shared/{token}", headers=auth("dave")).json()["user_access"] == "public"

def test_unknown_token_is_not_found(client):
    response = client.get("/api/shared/0123456789abcdef0123456789abcdef")
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"

def test_expired_link_is_distinct_from_missing(client, make_user, make_set, test_db):
    make_user("alice")
    flashcard_set = make_set("alice")
    link = ShareLink(
        set_id=flashcard_set.id,
        created_by="alice",
        share_token="expired-token",
        expires_at=datetime.now(UTC).replace(tzinfo=None) - timedelta(minutes=1),
        is_active=True
    )
    test_db.add(link)
    test_db.commit()

    response = client.get("/api/shared/expired-token")
    assert response.status_code == 410
    assert response.json()["error"] == "expired"

def test_future_expiry_is_still_valid(client, make_user, make_set):
    make_user("alice")
    flashcard_set = make_set("alice")
    expires_at = (datetime.now(UTC) + timedelta(days=1)).isoformat()
    link = create_link(client, flashcard_set.id, expires_at=expires_at)

    assert link["expires_at"] is not None
    assert client.get(f"/api/shared/{link['share_token']}").status_code == 200

def test_aware_expiry_is_stored_as_utc(client, make_user, make_set, test_db):
    make_user("alice")
    flashcard_set = make_set("alice")
    expires_at = datetime(2099, 1, 1, 12, 0, tzinfo=UTC).astimezone()
    link = create_link(client, flashcard_set.id, expires_at=expires_at.isoformat())

    stored = test_db.query(ShareLink).filter(ShareLink.share_token == link["share_token"]).one()
    assert stored.expires_at == datetime(2099, 1, 1, 12, 0)

def test_revoke_is_owner_only_and_idempotent(client, make_user, make_set, grant):
    make_user("alice")
    make_user("carol")
    flashcard_set = make_set("alice")
    grant(flashcard_set.id, "carol", "editor")
    token = create_link(client, flashcard_set.id)["share_token"]

    denied = client.delete(f"/api/sets/{flashcard_set.id}/share/{token}", headers=auth("carol"))
    assert denied.status_code == 403

    first = client.delete(f"/api/sets/{flashcard_set.id}/share/{token}", headers=auth("alice"))
    second = client.delete(f"/api/sets/{flashcard_set.id}/share/{token}", headers=auth("alice"))
    assert first.status_code == second.status_code == 200

    response = client.get(f"/api/shared/{token}")
    assert response.status_code == 404

def test_revoke_on_invisible_set_is_not_found(client, make_user, make_set):
    make_user("alice")
    flashcard_set = make_set("alice")
    token = create_link(client, flashcard_set.id)["share_token"]

    response = client.delete(f"/api/sets/{flashcard_set.id}/share/{token}", headers=auth("mallory"))
    assert response.status_code == 404

def test_list_links_newest_first(client, make_user, make_set):
    make_user("alice")
    flashcard_set = make_set("alice")
    first = create_link(client, flashcard_set.id)["share_token"]
    second = create_link(client, flashcard_set.id)["share_token"]

    links = client.get(f"/api/sets/{flashcard_set.id}/share", headers=auth("alice")).json()
    assert [link["share_token"] for link in links] == [second, first]

def test_add_collaborator_by_email(client, make_user, make_set):
    make_user("alice")
    make_user("bob", email="bob@example.com")
    flashcard_set = make_set("alice")

    response = client.post(
        f"/api/sets/{flashcard_set.id}/collaborators",
        json={"user_email": "Bob@Example.com", "permission": "write"},
        headers=auth("alice")
    )
    assert response.status_code == 200
    assert response.json()["permission"] == "editor"
    assert response.json()["user_id"] == "bob"

    # Re-inviting updates the existing grant in place
    again = client.post(
        f"/api/sets/{flashcard_set.id}/collaborators",
        json={"user_email": "bob@example.com", "permission": "viewer"},
        headers=auth("alice")
    )
    assert again.json()["id"] == response.json()["id"]

    collaborators = client.get(f"/api/sets/{flashcard_set.id}/collaborators", headers=auth("bob")).json()
    assert [(c["user_id"], c["permission"]) for c in collaborators] == [("bob", "viewer")]

def test_add_collaborator_rejects_bad_input(client, make_user, make_set):
    make_user("alice")
    flashcard_set = make_set("alice")

    bad_permission = client.post(
        f"/api/sets/{flashcard_set.id}/collaborators",
        json={"user_email": "bob@example.com", "permission": "superuser"},
        headers=auth("alice")
    )
    assert bad_permission.status_code == 400

    unknown_user = client.post(
        f"/api/sets/{flashcard_set.id}/collaborators",
        json={"user_email": "nobody@example.com"},
        headers=auth("alice")
    )
    assert unknown_user.status_code == 404

    owner_self = client.post(
        f"/api/sets/{flashcard_set.id}/collaborators",
        json={"user_email": "alice@example.com"},
        headers=auth("alice")
    )
    assert owner_self.status_code == 400

def test_only_owner_manages_collaborators(client, make_user, make_set, grant):
    make_user("alice")
    make_user("bob")
    make_user("carol")
    flashcard_set = make_set("alice")
    grant(flashcard_set.id, "bob", "owner")
    carol_grant = grant(flashcard_set.id, "carol", "viewer")
    carol_grant_id = carol_grant.id

    update = client.put(
        f"/api/sets/{flashcard_set.id}/collaborators/{carol_grant_id}",
        json={"permission": "editor"},
        headers=auth("bob")
    )
    assert update.status_code == 403

    update = client.put(
        f"/api/sets/{flashcard_set.id}/collaborators/{carol_grant_id}",
        json={"permission": "editor"},
        headers=auth("alice")
    )
    assert update.status_code == 200
    assert update.json()["permission"] == "editor"

    removed = client.delete(f"/api/sets/{flashcard_set.id}/collaborators/{carol_grant_id}", headers=auth("alice"))
    assert removed.status_code == 200
    assert client.get(f"/api/sets/{flashcard_set.id}", headers=auth("carol")).status_code == 404

def test_public_visitor_cannot_list_collaborators(client, make_user, make_set):
    make_user("alice")
    flashcard_set = make_set("alice", is_public=True)
    response = client.get(f"/api/sets/{flashcard_set.id}/collaborators", headers=auth("dave"))
    assert response.status_code == 403
