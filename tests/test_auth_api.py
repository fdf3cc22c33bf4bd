from conftest import PASSWORD, register


def test_register_creates_plain_user(client):
    user = register(client, "alice")
    assert user["username"] == "alice"
    assert user["role"] == "user"
    assert "hashed_password" not in user


def test_register_ignores_requested_role(client):
    response = client.post(
        "/api/auth/register",
        json={"username": "mallory", "email": "mallory@example.com", "password": PASSWORD, "role": "admin"},
    )
    assert response.status_code == 201
    assert response.json()["role"] == "user"


def test_register_rejects_duplicates_and_bad_input(client):
    register(client, "alice")
    taken_name = client.post(
        "/api/auth/register", json={"username": "alice", "email": "other@example.com", "password": PASSWORD}
    )
    assert taken_name.status_code == 400
    assert taken_name.json()["detail"] == "Username already registered."

    taken_email = client.post(
        "/api/auth/register", json={"username": "alice2", "email": "alice@example.com", "password": PASSWORD}
    )
    assert taken_email.status_code == 400

    short = client.post("/api/auth/register", json={"username": "eve", "email": "eve@example.com", "password": "abc"})
    assert short.status_code == 400
    bad_email = client.post("/api/auth/register", json={"username": "eve", "email": "nope", "password": PASSWORD})
    assert bad_email.status_code == 400


def test_login_sets_token_cookie(client):
    register(client, "alice")
    response = client.post("/api/auth/login", json={"username": "alice", "password": PASSWORD})

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["username"] == "alice"
    assert client.cookies.get("token") == body["access_token"]

    me = client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.json()["username"] == "alice"


def test_logout_clears_cookie(client):
    register(client, "alice")
    client.post("/api/auth/login", json={"username": "alice", "password": PASSWORD})

    assert client.post("/api/auth/logout").status_code == 200
    assert client.get("/api/auth/me").status_code == 401


def test_login_with_wrong_password(client):
    register(client, "alice")
    response = client.post("/api/auth/login", json={"username": "alice", "password": "wrong-password"})
    assert response.status_code == 401
    assert client.post("/api/auth/login", json={"username": "ghost", "password": PASSWORD}).status_code == 401


def test_invalid_or_missing_token(client):
    assert client.get("/api/auth/me").status_code == 401
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Could not validate credentials"


def test_seeded_admin_can_list_users(client, admin_headers, alice):
    response = client.get("/api/users", headers=admin_headers)
    assert response.status_code == 200
    assert [u["username"] for u in response.json()] == ["admin", "alice"]

    assert client.get("/api/users", headers=alice[1]).status_code == 403


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
