"""Configuration management for the ipadrop CLI."""

import json
import os
import shutil
from pathlib import Path
from typing import Optional

from common.constants import (
    DEFAULT_SERVER_HOST,
    DEFAULT_SERVER_PORT,
    DEFAULT_STORE_PATH,
    DEFAULT_UPLOAD_FIELD,
    DEFAULT_UPLOAD_TIMEOUT_SECONDS,
)
from common.logging_config import get_logger

logger = get_logger(__name__)


def _default_config() -> dict:
    return {
        "store_path": os.environ.get("IPADROP_STORE_PATH", DEFAULT_STORE_PATH),
        "inbox_path": os.environ.get("IPADROP_INBOX_PATH"),
        "server_host": os.environ.get("IPADROP_SERVER_HOST", DEFAULT_SERVER_HOST),
        "server_port": int(os.environ.get("IPADROP_SERVER_PORT", str(DEFAULT_SERVER_PORT))),
        "upload_url": os.environ.get("IPADROP_UPLOAD_URL"),
        "upload_field": os.environ.get("IPADROP_UPLOAD_FIELD", DEFAULT_UPLOAD_FIELD),
        "timeout": DEFAULT_UPLOAD_TIMEOUT_SECONDS,
    }


class Config:
    """Manages CLI configuration stored in JSON file."""

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.ipadrop/config.json)
        """
        self.config_path = config_path
        self.data = self._load()

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        Returns:
            Configuration dictionary
        """
        defaults = _default_config()
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            import tempfile
            self.config_path = Path(tempfile.gettempdir()) / '.ipadrop' / 'config.json'
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                config = defaults.copy()
                config.update(data)
                return config
            except (json.JSONDecodeError, IOError) as e:
                logger.warning(f"Unreadable config {self.config_path}, using defaults: {e}")
                backup_path = self.config_path.with_suffix('.json.bak')
                try:
                    shutil.copy(self.config_path, backup_path)
                except OSError:
                    pass
                return defaults
        else:
            try:
                with open(self.config_path, 'w') as f:
                    json.dump(defaults, f, indent=2)
            except IOError as e:
                logger.warning(f"Cannot write default config {self.config_path}: {e}")
            return defaults

    def save(self) -> None:
        """Save current configuration to file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
        except IOError as e:
            logger.warning(f"Cannot save config {self.config_path}: {e}")

    def get_store_path(self) -> Path:
        return Path(self.data.get('store_path') or DEFAULT_STORE_PATH).expanduser()

    def get_inbox_path(self) -> Optional[Path]:
        """
        Get inbox directory.

        Returns:
            Configured inbox, or None to use the store's default (store/Inbox)
        """
        inbox = self.data.get('inbox_path')
        return Path(inbox).expanduser() if inbox else None

    def get_server_address(self) -> tuple[str, int]:
        return (
            self.data.get('server_host', DEFAULT_SERVER_HOST),
            int(self.data.get('server_port', DEFAULT_SERVER_PORT)),
        )

    def get_upload_url(self) -> Optional[str]:
        return self.data.get('upload_url')

    def set_upload_url(self, url: str) -> None:
        """
        Set upload endpoint and save to file.

        Args:
            url: Remote endpoint accepting multipart uploads
        """
        self.data['upload_url'] = url
        self.save()

    def get_upload_field(self) -> str:
        return self.data.get('upload_field', DEFAULT_UPLOAD_FIELD)

    def get_timeout(self) -> int:
        """
        Get request timeout in seconds.

        Returns:
            Timeout value in seconds
        """
        return self.data.get('timeout', DEFAULT_UPLOAD_TIMEOUT_SECONDS)
