"""
vSphere mock infrastructure for testing
"""
from .base import MockVSphereObject
from .service import MockServiceInstance, MockContent
from .vm import MockVirtualMachine, MockSnapshot
from .inventory import (MockDatacenter, MockFolder, MockResourcePool, MockComputeResource,
                        MockClusterComputeResource, MockDatastore)
from .tasks import MockTask, polling_task
from .builders import build_inventory

__all__ = [
    'MockVSphereObject',
    'MockServiceInstance',
    'MockContent',
    'MockVirtualMachine',
    'MockSnapshot',
    'MockDatacenter',
    'MockFolder',
    'MockResourcePool',
    'MockComputeResource',
    'MockClusterComputeResource',
    'MockDatastore',
    'MockTask',
    'polling_task',
    'build_inventory'
]
