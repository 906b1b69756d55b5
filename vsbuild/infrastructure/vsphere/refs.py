"""
Typed references to vSphere managed objects

Each wrapper holds one managed object for the duration of a call chain.
The wrappers share no base class.
"""

from dataclasses import dataclass
from typing import Any, Optional


def _moid(obj: Any) -> Optional[str]:
    return getattr(obj, '_moId', None)


@dataclass(frozen=True)
class VMRef:
    """Reference to a virtual machine"""
    obj: Any

    @property
    def id(self) -> Optional[str]:
        return _moid(self.obj)

    @property
    def name(self) -> str:
        return self.obj.name


@dataclass(frozen=True)
class FolderRef:
    """Reference to an inventory folder"""
    obj: Any

    @property
    def id(self) -> Optional[str]:
        return _moid(self.obj)

    @property
    def name(self) -> str:
        return self.obj.name


@dataclass(frozen=True)
class ResourcePoolRef:
    """Reference to a resource pool"""
    obj: Any

    @property
    def id(self) -> Optional[str]:
        return _moid(self.obj)

    @property
    def name(self) -> str:
        return self.obj.name


@dataclass(frozen=True)
class DatastoreRef:
    """Reference to a datastore"""
    obj: Any

    @property
    def id(self) -> Optional[str]:
        return _moid(self.obj)

    @property
    def name(self) -> str:
        return self.obj.name


@dataclass(frozen=True)
class DatacenterRef:
    """Reference to a datacenter"""
    obj: Any

    @property
    def id(self) -> Optional[str]:
        return _moid(self.obj)

    @property
    def name(self) -> str:
        return self.obj.name


@dataclass(frozen=True)
class SnapshotRef:
    """Reference to a VM snapshot"""
    obj: Any

    @property
    def id(self) -> Optional[str]:
        return _moid(self.obj)
