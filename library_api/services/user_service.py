from sqlalchemy.exc import IntegrityError
from werkzeug.security import generate_password_hash

from library_api.errors import InvalidRequestError, NotFoundError
from library_api.models.user import ROLE_MEMBER, ROLES, User
from library_api.repositories.user_repo import UserRepo

EMAIL_MAX = 255
PASSWORD_MIN = 6
PASSWORD_MAX = 128


def user_to_dict(u: User) -> dict:
    # password_hash is never serialized
    return {
        "id": u.id,
        "email": u.email,
        "role": u.role,
        "created_at": u.created_at.isoformat() if u.created_at else None,
        "updated_at": u.updated_at.isoformat() if u.updated_at else None,
    }


class UserService:
    @staticmethod
    def _validate_role(role: str) -> str:
        if role not in ROLES:
            raise InvalidRequestError(f"role must be one of: {', '.join(ROLES)}")
        return role

    @staticmethod
    def create_user(email: str, password: str, role: str = ROLE_MEMBER) -> User:
        if not isinstance(email, str):
            raise InvalidRequestError("A valid email is required")
        if not isinstance(password, str):
            raise InvalidRequestError(f"password must be {PASSWORD_MIN}-{PASSWORD_MAX} characters")
        email = email.strip().lower()

        if not email or "@" not in email or len(email) > EMAIL_MAX:
            raise InvalidRequestError("A valid email is required")
        if not PASSWORD_MIN <= len(password) <= PASSWORD_MAX:
            raise InvalidRequestError(f"password must be {PASSWORD_MIN}-{PASSWORD_MAX} characters")
        UserService._validate_role(role)

        if UserRepo.get_by_email(email):
            raise InvalidRequestError("Email already exists")

        user = User(
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
        )
        try:
            return UserRepo.create(user)
        except IntegrityError:
            # concurrent registration of the same email
            raise InvalidRequestError("Email already exists")

    @staticmethod
    def list_users():
        return UserRepo.list_all()

    @staticmethod
    def get_user(user_id: int) -> User:
        user = UserRepo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def update_user(user_id: int, data: dict) -> User:
        user = UserService.get_user(user_id)
        if data.get("role") is not None:
            user.role = UserService._validate_role(data["role"])
        UserRepo.commit()
        return user
