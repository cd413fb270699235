import pytest

from library_api.errors import InvalidRequestError
from library_api.models.user import User
from library_api.repositories.user_repo import UserRepo
from library_api.services.user_service import UserService


def test_email_conflict_at_insert_is_a_client_error(app, monkeypatch):
    UserService.create_user("dup@example.com", "secret123")
    # the existence check ran before the other registration committed
    monkeypatch.setattr(UserRepo, "get_by_email", staticmethod(lambda _email: None))

    with pytest.raises(InvalidRequestError, match="Email already exists"):
        UserService.create_user("dup@example.com", "secret123")

    assert User.query.filter_by(email="dup@example.com").count() == 1


@pytest.mark.parametrize("email,password,message", [
    (123, "secret123", "A valid email is required"),
    (None, "secret123", "A valid email is required"),
    ("ok@example.com", 123456, "password must be 6-128 characters"),
    ("ok@example.com", None, "password must be 6-128 characters"),
])
def test_create_user_rejects_non_string_credentials(app, email, password, message):
    with pytest.raises(InvalidRequestError, match=message):
        UserService.create_user(email, password)


def test_update_user_role(make_user):
    user = make_user()
    assert UserService.update_user(user.id, {"role": "librarian"}).role == "librarian"

    with pytest.raises(InvalidRequestError):
        UserService.update_user(user.id, {"role": "wizard"})
