"""
Encryption utilities for stored profiles.
"""
import os
import logging

from pathlib import Path
from typing import Optional, Union
from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)


class ConfigEncrypter:
    """
    Fernet encryption with the key kept in a file next to the data it protects.
    """

    def __init__(self, key_path: Optional[Union[str, Path]] = None):
        """
        Args:
            key_path: Path to the key file, created on first use. Without a
                path an ephemeral key is used.
        """
        self.key_path = Path(key_path) if key_path else None
        self.cipher = Fernet(self._load_key())

    def _load_key(self) -> bytes:
        if self.key_path is None:
            logger.debug("Using an ephemeral key")
            return Fernet.generate_key()

        if self.key_path.exists():
            logger.debug(f"Key loaded from {self.key_path}")
            return self.key_path.read_bytes().strip()

        self.key_path.parent.mkdir(parents=True, exist_ok=True)
        key = Fernet.generate_key()
        self.key_path.write_bytes(key)
        try:
            os.chmod(self.key_path, 0o600)
        except OSError as e:
            logger.warning(f"Could not restrict permissions of key file: {e}")
        logger.debug(f"New key generated in {self.key_path}")
        return key

    def encrypt(self, data: Union[str, bytes]) -> bytes:
        if isinstance(data, str):
            data = data.encode()
        return self.cipher.encrypt(data)

    def decrypt(self, encrypted_data: Union[str, bytes]) -> bytes:
        """
        Decrypt data.

        Raises:
            ValueError: If the data was not encrypted with this key or is corrupted
        """
        if isinstance(encrypted_data, str):
            encrypted_data = encrypted_data.encode()
        try:
            return self.cipher.decrypt(encrypted_data)
        except InvalidToken:
            logger.error("Invalid token or corrupted data")
            raise ValueError("data cannot be decrypted: invalid token or corrupted data")
