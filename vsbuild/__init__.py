"""
vsbuild - vSphere VM build driver
Clone, configure, power-cycle, snapshot and templatize VMs through pyVmomi
"""

__version__ = "0.1.0"
__author__ = "vsbuild Development Team"

from .config import ConnectConfig, CloneConfig, HardwareConfig, BuildConfig, load_config
from .context import OperationContext
from .exceptions import (VSBuildError, ConnectionError, AuthenticationError,
                         ResolutionError, ConfigurationError, RemoteTaskError,
                         RemoteCallError, TimeoutError, CancelledError)
from .infrastructure.vsphere import Driver, establish, VMRef

__all__ = [
    "ConnectConfig",
    "CloneConfig",
    "HardwareConfig",
    "BuildConfig",
    "load_config",
    "OperationContext",
    "Driver",
    "establish",
    "VMRef",
    "VSBuildError",
    "ConnectionError",
    "AuthenticationError",
    "ResolutionError",
    "ConfigurationError",
    "RemoteTaskError",
    "RemoteCallError",
    "TimeoutError",
    "CancelledError",
]
