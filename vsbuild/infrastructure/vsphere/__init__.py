"""
vSphere build driver
"""

from .client import VSphereClient
from .finder import Finder
from .driver import Driver, establish
from .refs import VMRef, FolderRef, ResourcePoolRef, DatastoreRef, DatacenterRef, SnapshotRef

__all__ = [
    "VSphereClient",
    "Finder",
    "Driver",
    "establish",
    "VMRef",
    "FolderRef",
    "ResourcePoolRef",
    "DatastoreRef",
    "DatacenterRef",
    "SnapshotRef",
]
