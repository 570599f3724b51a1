# config/config_loader.py
"""
Config loader module for modular YAML configuration.
"""

from pathlib import Path

import yaml

from daenet.logging_system import get_logger

logger = get_logger(__name__)

DEFAULT_LOGGING = {
    "log_dir": None,
    "level": "INFO",
    "json": False,
}


class ConfigLoader:
    """Loads and merges modular configuration files."""

    def __init__(self, config_dir="config"):
        self.config_dir = Path(config_dir)
        self.config_dir.mkdir(parents=True, exist_ok=True)

    def load_all(self):
        """Load all configuration files and merge them."""
        config = {}

        # Load devices config
        devices_path = self.config_dir / "devices.yml"
        if devices_path.exists():
            with open(devices_path) as f:
                devices_data = yaml.safe_load(f) or {}
                config["devices"] = devices_data.get("devices", [])
        else:
            config["devices"] = self._create_default_devices()
            self._save_devices(config["devices"])

        # Load logging config
        logging_path = self.config_dir / "logging.yml"
        if logging_path.exists():
            with open(logging_path) as f:
                logging_data = yaml.safe_load(f) or {}
                config["logging"] = {
                    **DEFAULT_LOGGING,
                    **logging_data.get("logging", {}),
                }
        else:
            config["logging"] = dict(DEFAULT_LOGGING)

        return config

    def get_device(self, name):
        """Return one board's settings by name."""
        for device in self.load_all()["devices"]:
            if device.get("name") == name:
                return device
        raise KeyError(f"No device named {name!r} in {self.config_dir / 'devices.yml'}")

    def _create_default_devices(self):
        """Create default device configuration."""
        return [
            {
                "name": "relay_board_1",
                "version": 2,
                "host": "localhost",
                "alias": "DAEnetIP2",
                "community": "public",
                "port": 161,
                "timeout": 2.0,
                "retries": 1,
            },
        ]

    def _save_devices(self, devices):
        """Save devices configuration to file."""
        devices_path = self.config_dir / "devices.yml"
        with open(devices_path, "w") as f:
            yaml.dump({"devices": devices}, f, default_flow_style=False)
        logger.info(f"Created default devices config at {devices_path}")
