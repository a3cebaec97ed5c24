import logging

from flask import Blueprint, jsonify, request
from flask_cors import CORS

from auth.authhelpers import create_access_token, jwt_required
from services import accounts
from utils.app_context import current_uid, get_store

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)
CORS(auth_bp)


@auth_bp.route("/signup", methods=['POST'])
def signup():
    """
    Create an account and sign in
    ---
    tags:
      - User Authentication
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [name, email, password]
          properties:
            name: {type: string}
            email: {type: string, format: email}
            password: {type: string, format: password}
    responses:
      201:
        description: Account created. Returns the user and an access token.
      400:
        description: Missing fields or email already in use.
    """
    data = request.get_json(silent=True) or {}
    name = data.get("name")
    email = data.get("email")
    password = data.get("password")

    if not all([name, email, password]):
        return jsonify({"error": "Name, email and password are required"}), 400

    user = accounts.sign_up(get_store(), name, email, password)
    return jsonify({"user": user, "access_token": create_access_token(user['uid'])}), 201


@auth_bp.route("/login", methods=['POST'])
def login():
    """
    Sign in with email and password
    ---
    tags:
      - User Authentication
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          properties:
            email: {type: string, format: email}
            password: {type: string, format: password}
    responses:
      200:
        description: Signed in. Returns the user and an access token.
      400:
        description: Missing email or password.
      401:
        description: Invalid email or password.
    """
    data = request.get_json(silent=True) or {}
    email = data.get("email")
    password = data.get("password")

    if not all([email, password]):
        return jsonify({"error": "Email and password are required"}), 400

    user = accounts.sign_in(get_store(), email, password)
    return jsonify({"user": user, "access_token": create_access_token(user['uid'])}), 200


@auth_bp.route("/logout", methods=['POST'])
@jwt_required
def logout():
    """
    Sign out
    ---
    tags:
      - User Authentication
    responses:
      200:
        description: Signed out.
    """
    accounts.sign_out(get_store(), current_uid())
    return jsonify({"message": "Signed out"}), 200


@auth_bp.route("/me", methods=['GET'])
@jwt_required
def me():
    """
    Current user
    ---
    tags:
      - User Authentication
    responses:
      200:
        description: The signed-in user.
      404:
        description: The token's user no longer exists.
    """
    return jsonify(accounts.get_user(get_store(), current_uid())), 200


@auth_bp.route("/me", methods=['PATCH'])
@jwt_required
def rename_me():
    data = request.get_json(silent=True) or {}
    if not data.get("name"):
        return jsonify({"error": "Name is required"}), 400
    return jsonify(accounts.update_name(get_store(), current_uid(), data["name"])), 200
