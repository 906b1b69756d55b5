"""
Shared test fixtures and configuration for vsbuild tests
"""

import pytest
from unittest.mock import Mock
from vsbuild.config import ConnectConfig, CloneConfig, HardwareConfig
from vsbuild.infrastructure.vsphere.client import VSphereClient
from vsbuild.infrastructure.vsphere.driver import Driver
from vsbuild.infrastructure.vsphere.finder import Finder
from vsbuild.infrastructure.vsphere.refs import VMRef
from tests.mocks.vsphere import MockServiceInstance, MockVirtualMachine, build_inventory


@pytest.fixture
def vsphere_content():
    """Fake inventory with a single datacenter DC1"""
    return build_inventory()


@pytest.fixture
def mock_vsphere_service_instance(vsphere_content):
    """Mock vSphere service instance"""
    return MockServiceInstance(vsphere_content)


@pytest.fixture
def connected_client(vsphere_content):
    """VSphereClient already holding the fake content"""
    client = VSphereClient(
        host="vcenter.example.com",
        username="admin@vsphere.local",
        password="password"
    )
    client._service_instance = Mock()
    client._content = vsphere_content
    return client


@pytest.fixture
def finder(vsphere_content):
    """Finder bound to DC1"""
    finder = Finder(vsphere_content)
    finder.set_datacenter(finder.datacenter_or_default("DC1"))
    return finder


@pytest.fixture
def driver(connected_client, finder):
    """Driver over the fake inventory"""
    return Driver(connected_client, finder.datacenter_or_default("DC1"), finder)


@pytest.fixture
def mock_vm():
    """Powered-on mock VM"""
    return MockVirtualMachine("test-vm", "poweredOn", ip_address="192.168.1.100")


@pytest.fixture
def vm_ref(mock_vm):
    return VMRef(mock_vm)


@pytest.fixture
def connect_config():
    return ConnectConfig(
        vcenter_server="vcenter.example.com",
        username="admin@vsphere.local",
        password="password",
        datacenter="DC1",
        insecure_connection=True
    )


@pytest.fixture
def clone_config():
    return CloneConfig(
        template="ubuntu-template",
        vm_name="build-01",
        folder="Builds",
        host="esxi-01",
        resource_pool="build-pool",
        datastore="datastore2"
    )


@pytest.fixture
def hardware_config():
    return HardwareConfig(cpus=4, ram=8192)
