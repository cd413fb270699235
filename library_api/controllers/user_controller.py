from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required

from library_api.models.user import ROLE_ADMIN, ROLE_MEMBER
from library_api.services.user_service import UserService, user_to_dict
from library_api.utils.decorators import role_required

user_bp = Blueprint("users", __name__)


@user_bp.get("/")
@jwt_required()
@role_required(ROLE_ADMIN)
def list_users():
    users = UserService.list_users()
    return jsonify({"success": True, "data": [user_to_dict(u) for u in users]})


@user_bp.get("/<id:user_id>")
@jwt_required()
@role_required(ROLE_ADMIN)
def get_user(user_id: int):
    return jsonify({"success": True, "data": user_to_dict(UserService.get_user(user_id))})


@user_bp.post("/")
@jwt_required()
@role_required(ROLE_ADMIN)
def create_user():
    data = request.get_json(silent=True) or {}
    user = UserService.create_user(
        email=data.get("email"),
        password=data.get("password"),
        role=data.get("role") or ROLE_MEMBER,
    )
    return jsonify({"success": True, "data": user_to_dict(user)}), 201


@user_bp.patch("/<id:user_id>")
@jwt_required()
@role_required(ROLE_ADMIN)
def update_user(user_id: int):
    data = request.get_json(silent=True) or {}
    user = UserService.update_user(user_id, data)
    return jsonify({"success": True, "data": user_to_dict(user)})
