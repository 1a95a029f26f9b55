from bovann.extensions import db
from bovann.models import User


def test_admin_creates_user(client, admin, auth_headers):
    response = client.post(
        "/users",
        json={"email": "Guard@Bovann.test", "password": "secret1", "role": "GUARD"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 201
    user = response.get_json()["user"]
    assert user["email"] == "guard@bovann.test"
    assert user["role"] == "GUARD"
    assert User.query.filter_by(email="guard@bovann.test").first().check_password("secret1")


def test_create_user_validation(client, admin, auth_headers):
    headers = auth_headers(admin)

    short = client.post("/users", json={"email": "a@b.co", "password": "123", "role": "GUARD"}, headers=headers)
    assert short.status_code == 400
    assert short.get_json()["message"] == "Password must be at least 6 characters"

    bad_role = client.post("/users", json={"email": "a@b.co", "password": "123456", "role": "JANITOR"}, headers=headers)
    assert bad_role.status_code == 400
    assert bad_role.get_json()["message"] == "Invalid role"


def test_duplicate_user_conflicts(client, admin, auth_headers):
    body = {"email": "acc@bovann.test", "password": "secret1", "role": "ACCOUNTANT"}
    client.post("/users", json=body, headers=auth_headers(admin))
    response = client.post("/users", json=body, headers=auth_headers(admin))
    assert response.status_code == 409


def test_only_admin_manages_users(client, accountant, auth_headers):
    response = client.get("/users", headers=auth_headers(accountant))
    assert response.status_code == 403


def test_list_and_get_users(client, admin, guard, auth_headers):
    listing = client.get("/users", headers=auth_headers(admin))
    assert listing.status_code == 200
    assert listing.get_json()["total"] == 2

    single = client.get(f"/users/{guard.id}", headers=auth_headers(admin))
    assert single.get_json()["user"]["role"] == "GUARD"

    missing = client.get("/users/unknown", headers=auth_headers(admin))
    assert missing.status_code == 404


def test_update_user_role(client, admin, guard, auth_headers):
    response = client.patch(f"/users/{guard.id}", json={"role": "SECRETARY"}, headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.get_json()["user"]["role"] == "SECRETARY"


def test_admin_cannot_modify_or_delete_self(client, admin, auth_headers):
    headers = auth_headers(admin)
    assert client.patch(f"/users/{admin.id}", json={"role": "GUARD"}, headers=headers).status_code == 403
    assert client.delete(f"/users/{admin.id}", headers=headers).status_code == 403


def test_delete_user(client, admin, guard, auth_headers):
    guard_id = guard.id
    response = client.delete(f"/users/{guard_id}", headers=auth_headers(admin))
    assert response.status_code == 200
    assert db.session.get(User, guard_id) is None
