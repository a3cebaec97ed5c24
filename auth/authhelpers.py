from datetime import datetime, timedelta, timezone
from functools import wraps

from flask import current_app, jsonify, request
import jwt


def _secret():
    return current_app.config['ACCESS_TOKEN_SECRET']


def create_access_token(user_id):
    minutes = current_app.config.get('ACCESS_TOKEN_MINUTES', 60)
    expiration = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    return jwt.encode({'user_id': user_id, 'exp': expiration}, _secret(), algorithm='HS256')


def decode_jwt(jwt_token, secret_key):
    try:
        # Decode the token and verify its signature
        return jwt.decode(jwt_token, secret_key, algorithms=["HS256"])
    except jwt.ExpiredSignatureError:
        return {"message": "Token has expired"}
    except jwt.InvalidTokenError:
        return {"message": "Invalid token"}


def _bearer_token():
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip()


def jwt_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = _bearer_token()
        if not token:
            return jsonify({"error": "Authorization header is missing or invalid"}), 401

        payload = decode_jwt(token, _secret())
        # Check for token validation errors
        if 'message' in payload:
            return jsonify({"error": payload['message']}), 401

        user_id = payload.get("user_id")
        if not user_id:
            return jsonify({"error": "Unauthorized Token"}), 401

        request.current_user_id = user_id
        return f(*args, **kwargs)
    return decorated_function


def jwt_optional(f):
    """Like jwt_required, but anonymous callers get current_user_id = None."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        request.current_user_id = None
        token = _bearer_token()
        if token:
            payload = decode_jwt(token, _secret())
            request.current_user_id = payload.get("user_id")
        return f(*args, **kwargs)
    return decorated_function
