"""
Tests for provider token encryption.
"""

import pytest
from cryptography.fernet import Fernet, InvalidToken

from config.settings import config
from connectors.encryption import decrypt_token, encrypt_token, is_encryption_enabled


class TestDisabled:
    @pytest.fixture(autouse=True)
    def _no_key(self, monkeypatch):
        monkeypatch.setattr(config, "token_encryption_key", "")

    def test_passthrough(self):
        assert not is_encryption_enabled()
        assert encrypt_token("ntn-token") == "ntn-token"
        assert decrypt_token("ntn-token") == "ntn-token"


class TestEnabled:
    @pytest.fixture(autouse=True)
    def _key(self, monkeypatch):
        monkeypatch.setattr(config, "token_encryption_key", Fernet.generate_key().decode())

    def test_round_trip(self):
        assert is_encryption_enabled()
        ciphertext = encrypt_token("ntn-token")
        assert ciphertext != "ntn-token"
        assert decrypt_token(ciphertext) == "ntn-token"

    def test_key_rotation_is_detected(self, monkeypatch):
        ciphertext = encrypt_token("ntn-token")
        monkeypatch.setattr(config, "token_encryption_key", Fernet.generate_key().decode())
        with pytest.raises(InvalidToken):
            decrypt_token(ciphertext)
