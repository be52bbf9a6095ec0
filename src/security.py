import os
import base64
import hashlib
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from config_store import ConfigError

TOKEN_PREFIX = "gAAAA"


def derive_key_from_phrase(phrase: str) -> bytes:
    return base64.urlsafe_b64encode(hashlib.sha256(phrase.encode()).digest())


def _get_key() -> Optional[bytes]:
    # 1) ENCRYPTION_KEY (via .env loaded in context.py)
    key = os.getenv("ENCRYPTION_KEY")
    if key:
        return key.strip().encode()
    # 2) passphrase
    phrase = os.getenv("RCONDASH_PASSPHRASE")
    if phrase:
        return derive_key_from_phrase(phrase)
    return None


def _fernet() -> Fernet:
    key = _get_key()
    if not key:
        raise ConfigError("encrypted password found but neither ENCRYPTION_KEY nor RCONDASH_PASSPHRASE is set")
    try:
        return Fernet(key)
    except ValueError as e:
        raise ConfigError(f"ENCRYPTION_KEY is not a valid Fernet key: {e}") from e


def is_encrypted(value: str) -> bool:
    return str(value).startswith(TOKEN_PREFIX)


def encrypt_value(value: str) -> str:
    return _fernet().encrypt(value.encode()).decode()


def decrypt_value(value: str) -> str:
    try:
        return _fernet().decrypt(value.encode()).decode()
    except InvalidToken as e:
        raise ConfigError("password could not be decrypted with the configured key") from e


def reveal_secret(value: str) -> str:
    """
    Plain values pass through, encrypted values (gAAAA...) are decrypted.
    """
    if value and is_encrypted(value):
        return decrypt_value(value)
    return value
