from library_api.models.user import ROLE_ADMIN, ROLE_MEMBER


def test_register_creates_member(client):
    resp = client.post("/auth/register", json={"email": "New@Example.com", "password": "secret123"})

    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert data["email"] == "new@example.com"
    assert data["role"] == ROLE_MEMBER
    assert "password_hash" not in data


def test_register_ignores_requested_role(client):
    resp = client.post("/auth/register", json={"email": "a@b.c", "password": "secret123", "role": ROLE_ADMIN})
    assert resp.get_json()["data"]["role"] == ROLE_MEMBER


def test_register_validation(client, make_user):
    make_user(email="taken@example.com")

    dup = client.post("/auth/register", json={"email": "TAKEN@example.com", "password": "secret123"})
    assert dup.status_code == 400
    assert dup.get_json()["message"] == "Email already exists"

    bad_email = client.post("/auth/register", json={"email": "nobody", "password": "secret123"})
    assert bad_email.status_code == 400
    assert bad_email.get_json()["message"] == "A valid email is required"

    short = client.post("/auth/register", json={"email": "x@example.com", "password": "123"})
    assert short.status_code == 400


def test_login_and_me(client, make_user):
    user = make_user(role=ROLE_ADMIN, email="boss@example.com", password="hunter22")

    resp = client.post("/auth/login", json={"email": "Boss@example.com", "password": "hunter22"})

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    assert body["user"]["id"] == user.id
    token = body["access_token"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.get_json()["user"]["email"] == "boss@example.com"
    assert me.get_json()["user"]["token_role"] == ROLE_ADMIN


def test_login_failures_are_indistinguishable(client, make_user):
    make_user(email="real@example.com", password="right-pass")

    wrong_pass = client.post("/auth/login", json={"email": "real@example.com", "password": "wrong-pass"})
    no_user = client.post("/auth/login", json={"email": "ghost@example.com", "password": "right-pass"})
    empty = client.post("/auth/login", json={})

    for resp in (wrong_pass, no_user, empty):
        assert resp.status_code == 401
        assert resp.get_json() == {"success": False, "message": "Invalid email or password"}


def test_token_from_login_can_borrow(client, make_user, make_book):
    make_user(email="reader@example.com", password="secret123")
    book = make_book(total=1)
    token = client.post(
        "/auth/login", json={"email": "reader@example.com", "password": "secret123"}
    ).get_json()["access_token"]

    resp = client.post("/borrowings/borrow", json={"book_id": book.id}, headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 201


def test_me_requires_token(client):
    assert client.get("/auth/me").status_code == 401


def test_non_string_credentials_are_rejected(client, make_user, admin, auth_headers):
    make_user(email="num@example.com", password="123456")

    for payload in ({"email": 123, "password": "secret123"}, {"email": "n@example.com", "password": 123456}):
        resp = client.post("/auth/register", json=payload)
        assert resp.status_code == 400
        assert resp.get_json()["success"] is False

    for payload in ({"email": "num@example.com", "password": 123456}, {"email": ["num@example.com"], "password": "123456"}):
        resp = client.post("/auth/login", json=payload)
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Invalid email or password"

    resp = client.post("/users/", json={"email": 42, "password": "secret123"}, headers=auth_headers(admin))
    assert resp.status_code == 400
