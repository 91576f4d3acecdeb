"""
Auth Gate - sign-in and user administration.

Passwords are stored as Argon2id hashes; the plain password is never stored,
compared or logged. A successful login with an outdated hash rehashes it.
"""

import logging
import uuid
from typing import List, Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from psycopg2 import errors as pg_errors

from partnerdb.db.connection import get_db_cursor
from partnerdb.errors import AuthenticationError, DuplicateKeyError, NotFoundError, ValidationError
from partnerdb.models import AuthUser
from partnerdb.bus.events import bus, EVENT_USER_LOGGED_IN, EVENT_USER_CHANGED

logger = logging.getLogger(__name__)

PROTECTED_USER_ID = 'admin'

_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    """Constant-time check of a password against a stored hash."""
    try:
        return _hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def _user(row) -> AuthUser:
    return AuthUser(id=row['id'], name=row['name'], username=row['username'], created_at=row.get('created_at'))


def login(username: str, password: str) -> AuthUser:
    """
    Check credentials.
    Raises: ValidationError if either is blank, AuthenticationError if they don't match
    """
    if not (username or '').strip() or not password:
        raise ValidationError("Username and password are required")

    with get_db_cursor() as cur:
        cur.execute("SELECT * FROM authorized_users WHERE username = %s", (username,))
        row = cur.fetchone()

        if not row or not verify_password(row['password_hash'], password):
            logger.warning(f"login failed for username={username!r}")
            raise AuthenticationError("Invalid username or password")

        if _hasher.check_needs_rehash(row['password_hash']):
            cur.execute("""
                UPDATE authorized_users SET password_hash = %s, updated_at = NOW()
                WHERE id = %s
            """, (hash_password(password), row['id']))
            logger.info(f"Rehashed password for user {row['id']}")

        user = _user(row)
        logger.info(f"login ok: {user.username}")
        bus.emit(EVENT_USER_LOGGED_IN, {'user_id': user.id})
        return user


def list_users() -> List[AuthUser]:
    with get_db_cursor() as cur:
        cur.execute("SELECT id, name, username, created_at FROM authorized_users ORDER BY created_at DESC")
        return [_user(row) for row in cur.fetchall()]


def add_user(name: str, username: str, password: str, user_id: Optional[str] = None) -> AuthUser:
    """
    Create a user.
    Raises: ValidationError on blank fields, DuplicateKeyError if the username (or id) is taken
    """
    if not (name or '').strip() or not (username or '').strip() or not password:
        raise ValidationError("Name, username and password are required")

    user_id = user_id or uuid.uuid4().hex
    with get_db_cursor() as cur:
        try:
            cur.execute("""
                INSERT INTO authorized_users (id, name, username, password_hash)
                VALUES (%s, %s, %s, %s)
                RETURNING id, name, username, created_at
            """, (user_id, name, username, hash_password(password)))
        except pg_errors.UniqueViolation as e:
            raise DuplicateKeyError(f"Username {username} already exists") from e

        user = _user(cur.fetchone())
        logger.info(f"Added user {user.id}: {user.username}")
        bus.emit(EVENT_USER_CHANGED, {'user_id': user.id, 'action': 'added'})
        return user


def update_user(
    user_id: str,
    name: Optional[str] = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
    current_password: Optional[str] = None,
) -> AuthUser:
    """
    Change name, username and/or password. When current_password is given it must match.
    Raises: NotFoundError, AuthenticationError, DuplicateKeyError
    """
    updates = {}
    if name:
        updates['name'] = name
    if username:
        updates['username'] = username

    with get_db_cursor() as cur:
        cur.execute("SELECT * FROM authorized_users WHERE id = %s FOR UPDATE", (user_id,))
        row = cur.fetchone()
        if not row:
            raise NotFoundError(f"User {user_id} not found")

        if current_password is not None and not verify_password(row['password_hash'], current_password):
            logger.warning(f"update_user: current password mismatch for user {user_id}")
            raise AuthenticationError("Current password is incorrect")

        if password:
            updates['password_hash'] = hash_password(password)

        if not updates:
            return _user(row)

        # Keys come from the fixed set above, never from the request
        set_clause = ', '.join(f"{key} = %({key})s" for key in updates)
        params = dict(updates, user_id=user_id)
        try:
            cur.execute(f"""
                UPDATE authorized_users
                SET {set_clause}, updated_at = NOW()
                WHERE id = %(user_id)s
                RETURNING id, name, username, created_at
            """, params)
        except pg_errors.UniqueViolation as e:
            raise DuplicateKeyError(f"Username {username} already exists") from e

        user = _user(cur.fetchone())
        changed = sorted(k if k != 'password_hash' else 'password' for k in updates)
        logger.info(f"Updated user {user_id}: {changed}")
        bus.emit(EVENT_USER_CHANGED, {'user_id': user_id, 'action': 'updated'})
        return user


def delete_user(user_id: str) -> bool:
    """
    Remove a user. Idempotent. The admin account cannot be removed.
    Raises: ValidationError for the protected admin id
    """
    if user_id == PROTECTED_USER_ID:
        raise ValidationError("The admin account cannot be deleted")

    with get_db_cursor() as cur:
        cur.execute("DELETE FROM authorized_users WHERE id = %s", (user_id,))
        if cur.rowcount > 0:
            logger.info(f"Deleted user {user_id}")
            bus.emit(EVENT_USER_CHANGED, {'user_id': user_id, 'action': 'deleted'})
            return True
        return False
