from werkzeug.security import check_password_hash
from flask_jwt_extended import create_access_token

from library_api.errors import AuthenticationError
from library_api.models.user import ROLE_MEMBER
from library_api.repositories.user_repo import UserRepo
from library_api.services.user_service import UserService


class AuthService:
    @staticmethod
    def register(email: str, password: str):
        # self-registration always yields a member; roles are granted by an admin
        return UserService.create_user(email=email, password=password, role=ROLE_MEMBER)

    @staticmethod
    def login(email: str, password: str):
        if not isinstance(email, str) or not isinstance(password, str):
            raise AuthenticationError("Invalid email or password")

        user = UserRepo.get_by_email(email.strip().lower())
        if not user or not check_password_hash(user.password_hash, password):
            raise AuthenticationError("Invalid email or password")

        token = create_access_token(
            identity=str(user.id),
            additional_claims={"role": user.role, "email": user.email}
        )
        return token, user
