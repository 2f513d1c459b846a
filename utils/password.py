import logging

import bcrypt

from exceptions.user import InvalidPasswordException

MIN_PASSWORD_LENGTH = 6
# bcrypt only hashes the first 72 bytes; bcrypt>=5 rejects longer input
MAX_PASSWORD_BYTES = 72


def validate_new_password(password: str | None) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidPasswordException(f"must be at least {MIN_PASSWORD_LENGTH} characters long")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise InvalidPasswordException(f"must be at most {MAX_PASSWORD_BYTES} bytes long")


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password or not password_hash:
        return False
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > MAX_PASSWORD_BYTES:
        # Never set through validate_new_password, so it cannot match
        return False
    try:
        return bcrypt.checkpw(password_bytes, password_hash.encode("utf-8"))
    except ValueError as e:
        # Malformed hash in the database
        logging.error(f"Password hash verification failed: {e}")
        return False
