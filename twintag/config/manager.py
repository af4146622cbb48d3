"""
Profile manager for the Twintag SDK.

A profile stores the hosts, log level and token to use against one
deployment, e.g. staging or production. Profiles are kept encrypted in
``~/.twintag/config.json``.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from twintag.config.environment import Environment
from twintag.core.common import logger
from twintag.utils.encrypter import ConfigEncrypter
from twintag.utils.serializer import serialize_to_json

# Keys a profile may define
PROFILE_KEYS = ("host", "admin_host", "caching_host", "log_level", "token")


class ConfigManager:
    """Stored profiles, encrypted with a key kept beside them."""

    CONFIG_DIR = Path.home() / ".twintag"

    def __init__(self, config_dir: Optional[Union[str, Path]] = None):
        """
        Args:
            config_dir: Directory holding the profiles and key (defaults to ``~/.twintag``)
        """
        self.config_dir = Path(config_dir) if config_dir else self.CONFIG_DIR
        self.config_file = self.config_dir / "config.json"
        self.secret_key_file = self.config_dir / "secret.key"
        self.profiles: Dict[str, Dict[str, Any]] = {}
        self._ensure_config_dir()
        self.encrypter = ConfigEncrypter(self.secret_key_file)
        self._load_profiles()

    def _ensure_config_dir(self) -> None:
        self.config_dir.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Configuration directory ensured: {self.config_dir}")

    def _load_profiles(self) -> Dict[str, Dict[str, Any]]:
        """Load the saved profiles."""
        if not self.config_file.exists():
            logger.debug(f"Configuration file not found: {self.config_file}")
            return {}

        encrypted_data = self.config_file.read_text()
        if not encrypted_data:
            logger.debug("Configuration file is empty")
            return {}

        try:
            profiles = json.loads(self.encrypter.decrypt(encrypted_data))
        except ValueError as e:
            logger.warning(f"Could not read profiles from {self.config_file}: {e}")
            return {}

        self.profiles = profiles if isinstance(profiles, dict) else {}
        return self.profiles

    def _save_profiles(self) -> None:
        encrypted_data = self.encrypter.encrypt(serialize_to_json(self.profiles)).decode()
        self.config_file.write_text(encrypted_data)
        logger.debug(f"Profiles saved to {self.config_file}")

    def add_profile(self, name: str, profile: Dict[str, Any]) -> str:
        """
        Add or replace a profile.

        Args:
            name: Profile name
            profile: Values for any of ``host``, ``admin_host``, ``caching_host``,
                ``log_level`` and ``token``

        Returns:
            Profile name

        Raises:
            ValueError: If the profile has unknown keys or an invalid log level
        """
        unknown = set(profile) - set(PROFILE_KEYS)
        if unknown:
            raise ValueError(f"unknown profile keys: {', '.join(sorted(unknown))}")
        if profile.get("log_level"):
            # Validates the level
            Environment(log_level=profile["log_level"])

        self.profiles[name] = {k: v for k, v in profile.items() if v is not None}
        self._save_profiles()
        logger.info(f"Profile saved: {name}")
        return name

    def get_profile(self, name: str) -> Optional[Dict[str, Any]]:
        return self.profiles.get(name)

    def list_profiles(self) -> List[str]:
        return sorted(self.profiles)

    def remove_profile(self, name: str) -> bool:
        """
        Delete a profile.

        Returns:
            True if deleted, False if no such profile exists
        """
        if name not in self.profiles:
            logger.warning(f"Profile not found: {name}")
            return False
        del self.profiles[name]
        self._save_profiles()
        logger.info(f"Profile removed: {name}")
        return True

    def apply_profile(self, name: str, environment: Environment) -> Optional[str]:
        """
        Apply a profile's hosts and log level to an environment.

        Returns:
            The profile's token, if any

        Raises:
            KeyError: If no such profile exists
        """
        profile = self.profiles.get(name)
        if profile is None:
            raise KeyError(f"profile not found: {name}")

        if profile.get("host"):
            environment.host = profile["host"]
        if profile.get("admin_host"):
            environment.admin_host = profile["admin_host"]
        if profile.get("caching_host"):
            environment.caching_host = profile["caching_host"]
        if profile.get("log_level"):
            environment.set_log_level(profile["log_level"])
        return profile.get("token")
