from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt

from library_api.services.auth_service import AuthService
from library_api.services.user_service import UserService, user_to_dict
from library_api.utils.decorators import current_user_id

auth_bp = Blueprint("auth", __name__)


@auth_bp.post("/register", endpoint="auth_register")
def register():
    data = request.get_json(silent=True) or {}
    user = AuthService.register(
        email=data.get("email"),
        password=data.get("password"),
    )
    return jsonify({"success": True, "data": user_to_dict(user)}), 201


@auth_bp.post("/login", endpoint="auth_login")
def login():
    data = request.get_json(silent=True) or {}
    token, user = AuthService.login(data.get("email"), data.get("password"))
    return jsonify({
        "success": True,
        "access_token": token,
        "user": user_to_dict(user),
    })


@auth_bp.get("/me", endpoint="auth_me")
@jwt_required()
def me():
    claims = get_jwt()
    user = UserService.get_user(current_user_id())
    data = user_to_dict(user)
    data["token_role"] = claims.get("role")
    return jsonify({"success": True, "user": data})
