"""
Build configuration: connection, clone and hardware settings
"""

import logging
from dataclasses import dataclass, field, fields
from typing import Dict, Any, Optional, List
from urllib.parse import urlsplit
import yaml
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SHUTDOWN_TIMEOUT = 300


@dataclass(frozen=True)
class ConnectConfig:
    """vCenter endpoint and credentials"""
    vcenter_server: str = ""
    username: str = ""
    password: str = ""
    datacenter: str = ""
    insecure_connection: bool = False

    def errors(self) -> List[str]:
        errs = []
        if not self.vcenter_server:
            errs.append("vcenter_server is required")
        else:
            try:
                urlsplit(f"//{self.vcenter_server}").port
            except ValueError:
                errs.append(f"vcenter_server '{self.vcenter_server}' has an invalid port")
        if not self.username:
            errs.append("username is required")
        if not self.password:
            errs.append("password is required")
        return errs


@dataclass
class CloneConfig:
    """Clone request"""
    template: str = ""
    vm_name: str = ""
    folder: str = ""
    host: str = ""
    resource_pool: str = ""
    datastore: str = ""
    linked_clone: bool = False

    def errors(self) -> List[str]:
        errs = []
        if not self.template:
            errs.append("template is required")
        if not self.vm_name:
            errs.append("vm_name is required")
        return errs


@dataclass
class HardwareConfig:
    """Hardware settings applied by a single reconfiguration

    ``None`` leaves the corresponding setting untouched on the server.
    """
    cpus: Optional[int] = None
    cpu_reservation: Optional[int] = None
    cpu_limit: Optional[int] = None
    ram: Optional[int] = None  # MB
    ram_reservation: Optional[int] = None  # MB
    ram_reserve_all: bool = False

    def errors(self) -> List[str]:
        errs = []
        for name in ("cpus", "cpu_reservation", "cpu_limit", "ram", "ram_reservation"):
            value = getattr(self, name)
            if value is not None and not _is_int(value):
                errs.append(f"{name} must be an integer")
        if not isinstance(self.ram_reserve_all, bool):
            errs.append("ram_reserve_all must be true or false")
        if errs:
            return errs

        for name in ("cpus", "ram"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                errs.append(f"{name} must be positive")
        for name in ("cpu_reservation", "ram_reservation"):
            value = getattr(self, name)
            if value is not None and value < 0:
                errs.append(f"{name} must not be negative")
        # -1 means unlimited
        if self.cpu_limit is not None and self.cpu_limit < -1:
            errs.append("cpu_limit must be -1 (unlimited) or greater")
        if self.ram_reservation is not None and self.ram_reserve_all:
            errs.append("ram_reservation and ram_reserve_all cannot be used together")
        return errs


@dataclass
class BuildConfig:
    """Complete configuration for one clone-and-customize run"""
    connection: ConnectConfig = field(default_factory=ConnectConfig)
    clone: CloneConfig = field(default_factory=CloneConfig)
    hardware: HardwareConfig = field(default_factory=HardwareConfig)
    shutdown_timeout: float = DEFAULT_SHUTDOWN_TIMEOUT
    create_snapshot: bool = False
    convert_to_template: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BuildConfig":
        """Build config from a mapping with connection/clone/hardware sections"""
        data = dict(data or {})
        unknown = set(data) - {f.name for f in fields(cls)}
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys: {', '.join(sorted(unknown))}",
                details={'unknown': sorted(unknown)})

        return cls(
            connection=_section(ConnectConfig, data.get('connection')),
            clone=_section(CloneConfig, data.get('clone')),
            hardware=_section(HardwareConfig, data.get('hardware')),
            shutdown_timeout=data.get('shutdown_timeout', DEFAULT_SHUTDOWN_TIMEOUT),
            create_snapshot=bool(data.get('create_snapshot', False)),
            convert_to_template=bool(data.get('convert_to_template', False)),
        )

    def validate(self) -> None:
        """Raise ConfigurationError listing every problem found"""
        errs = self.connection.errors() + self.clone.errors() + self.hardware.errors()
        if isinstance(self.shutdown_timeout, bool) or \
                not isinstance(self.shutdown_timeout, (int, float)):
            errs.append("shutdown_timeout must be a number of seconds")
        elif self.shutdown_timeout <= 0:
            errs.append("shutdown_timeout must be positive")
        if errs:
            raise ConfigurationError(
                "Invalid configuration: " + "; ".join(errs),
                details={'errors': errs})


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _section(section_cls, values: Optional[Dict[str, Any]]):
    """Instantiate a config section, rejecting unknown keys"""
    values = values or {}
    if not isinstance(values, dict):
        raise ConfigurationError(f"{section_cls.__name__} section must be a mapping")
    allowed = {f.name for f in fields(section_cls)}
    unknown = set(values) - allowed
    if unknown:
        raise ConfigurationError(
            f"Unknown {section_cls.__name__} keys: {', '.join(sorted(unknown))}",
            details={'unknown': sorted(unknown)})
    return section_cls(**values)


def load_config(path: str) -> BuildConfig:
    """Load and validate a YAML build configuration"""
    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
    except (IOError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to read configuration {path}: {e}")

    if data is not None and not isinstance(data, dict):
        raise ConfigurationError(f"Configuration {path} must be a mapping")

    config = BuildConfig.from_dict(data or {})
    config.validate()
    logger.info(f"Loaded build configuration from {path}")
    return config
