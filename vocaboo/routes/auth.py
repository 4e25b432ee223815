import functools

from flask import Blueprint, request, jsonify, g
from werkzeug.security import check_password_hash, generate_password_hash

from vocaboo.exceptions import AuthError
from vocaboo.services.data_service import data_service
from vocaboo.utils.helpers import _create_token

auth_bp = Blueprint('auth', __name__)

def _bearer_token():
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip()
    return ""

def login_required(fn):
    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        user = data_service.get_user_by_token(_bearer_token())
        if not user:
            raise AuthError("unauthorized")
        g.user = user
        return fn(*args, **kwargs)
    return wrapper

@auth_bp.route('/auth/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}
    identifier = (data.get("email") or data.get("phone") or "").strip().lower()
    password = str(data.get("password") or "")
    if not identifier or not password:
        return jsonify({"error": "missing credentials"}), 400
    if data_service.get_user_by_identifier(identifier):
        return jsonify({"error": "exists"}), 409
    token = _create_token()
    user = data_service.create_user(identifier, generate_password_hash(password), token)
    if user is None:
        return jsonify({"error": "exists"}), 409
    return jsonify({"user_id": user["id"], "token": token})

@auth_bp.route('/auth/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    identifier = (data.get("email") or data.get("phone") or "").strip().lower()
    password = str(data.get("password") or "")
    user = data_service.get_user_by_identifier(identifier) if identifier else None
    if user and check_password_hash(user["password_hash"], password):
        token = _create_token()
        data_service.set_user_token(user["id"], token)
        return jsonify({"user_id": user["id"], "token": token})
    return jsonify({"error": "invalid"}), 401

@auth_bp.route('/auth/logout', methods=['POST'])
@login_required
def logout():
    data_service.set_user_token(g.user["id"], None)
    return jsonify({"ok": True})
