"""
Provider token encryption at rest.

Connector records keep the third-party access token so the background job
can run the sync later. Tokens are encrypted with Fernet from the
``cryptography`` library when ``TOKEN_ENCRYPTION_KEY`` is set; otherwise they
are stored as plaintext and a warning is logged once per key value.

Generate a key with::

    python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())"
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from cryptography.fernet import Fernet, InvalidToken

from config.settings import config

logger = logging.getLogger(__name__)

_ciphers: Dict[str, Optional[Fernet]] = {}


def _cipher() -> Optional[Fernet]:
    key = config.token_encryption_key
    if key in _ciphers:
        return _ciphers[key]

    if not key:
        logger.warning("TOKEN_ENCRYPTION_KEY not set — provider tokens are stored as plaintext")
        _ciphers[key] = None
        return None

    _ciphers[key] = Fernet(key.encode())
    logger.info("Provider token encryption enabled")
    return _ciphers[key]


def encrypt_token(plaintext: str) -> str:
    cipher = _cipher()
    if cipher is None:
        return plaintext
    return cipher.encrypt(plaintext.encode()).decode()


def decrypt_token(ciphertext: str) -> str:
    """
    Decrypt a stored token.

    Raises ``cryptography.fernet.InvalidToken`` when encryption is enabled and
    the value was written with a different key.
    """
    cipher = _cipher()
    if cipher is None:
        return ciphertext
    try:
        return cipher.decrypt(ciphertext.encode()).decode()
    except InvalidToken:
        logger.error("Stored provider token could not be decrypted with the configured key")
        raise


def is_encryption_enabled() -> bool:
    return _cipher() is not None
