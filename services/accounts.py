import logging

from flask_bcrypt import Bcrypt

from api.exception import AuthenticationError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

bcrypt = Bcrypt()


def public_user(record):
    if record is None:
        return None
    return {'uid': record['uid'], 'name': record.get('name') or '', 'email': record['email']}


def _normalize_email(email):
    return (email or '').strip().lower()


def sign_up(store, name, email, password):
    email = _normalize_email(email)
    if not all([name, email, password]):
        raise ValidationError("Name, email and password are required")
    if store.find('users', email=email):
        raise ValidationError("Email already in use.")

    record = store.insert('users', {
        'name': name,
        'email': email,
        'password_hash': bcrypt.generate_password_hash(password).decode('utf-8'),
    })
    user = public_user(record)
    logger.info("User %s signed up", user['uid'])
    store.auth_events.notify(user)
    return user


def sign_in(store, email, password):
    email = _normalize_email(email)
    if not all([email, password]):
        raise ValidationError("Email and password are required")

    matches = store.find('users', email=email)
    record = matches[0] if matches else None
    if not record or not record.get('password_hash') \
            or not bcrypt.check_password_hash(record['password_hash'], password):
        raise AuthenticationError("Invalid email or password")

    user = public_user(record)
    store.auth_events.notify(user)
    return user


def sign_out(store, uid):
    logger.info("User %s signed out", uid)
    store.auth_events.notify(None)


def subscribe(store, callback):
    """Registers callback for every auth transition; returns the unsubscribe function."""
    return store.auth_events.subscribe(callback)


def get_user(store, uid):
    record = store.get('users', uid)
    if record is None:
        raise NotFoundError("User not found.")
    return public_user(record)


def update_name(store, uid, name):
    if not name:
        raise ValidationError("Name is required")
    if store.get('users', uid) is None:
        raise NotFoundError("User not found.")
    return public_user(store.update('users', uid, {'name': name}))
