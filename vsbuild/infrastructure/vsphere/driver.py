"""
VM lifecycle driver for vSphere builds
"""

import logging
from typing import Optional
from pyVmomi import vim
from .client import VSphereClient, remote_call
from .finder import Finder
from .refs import VMRef, DatacenterRef, SnapshotRef
from ...config import ConnectConfig, CloneConfig, HardwareConfig
from ...context import OperationContext, ensure_context
from ...exceptions import (ConnectionError, ResolutionError, ConfigurationError,
                           TimeoutError)

logger = logging.getLogger(__name__)

SHUTDOWN_POLL_INTERVAL = 1
IP_POLL_INTERVAL = 2
SNAPSHOT_NAME = "Created by vsbuild"
LINKED_CLONE_DISK_MOVE_TYPE = "createNewChildDiskBacking"


def establish(config: ConnectConfig, ctx: Optional[OperationContext] = None) -> "Driver":
    """Connect to vCenter and bind a driver to the configured datacenter"""
    ctx = ensure_context(ctx)
    errs = config.errors()
    if errs:
        raise ConfigurationError("Invalid connection settings: " + "; ".join(errs),
                                 details={'errors': errs})
    ctx.check("Connecting to vSphere")

    client = VSphereClient.from_config(config)
    client.connect()

    finder = Finder(client.content)
    try:
        datacenter = finder.datacenter_or_default(config.datacenter)
    except ResolutionError as e:
        client.disconnect()
        raise ConnectionError(f"Failed to resolve datacenter: {e}") from e
    except Exception:
        client.disconnect()
        raise
    finder.set_datacenter(datacenter)

    return Driver(client, datacenter, finder)


class Driver:
    """Clone, configure, power-cycle and templatize VMs through one session

    Every mutating call waits for its vSphere task before returning. The
    optional ``ctx`` on each operation bounds that wait.
    """

    def __init__(self, client: VSphereClient, datacenter: DatacenterRef, finder: Finder):
        self.client = client
        self.datacenter = datacenter
        self.finder = finder

    def close(self) -> None:
        """Disconnect the underlying session"""
        self.client.disconnect()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def find_vm(self, name: str, ctx: Optional[OperationContext] = None) -> VMRef:
        """Resolve an existing VM by name or inventory path"""
        ensure_context(ctx).check(f"Resolving VM '{name}'")
        return self.finder.virtual_machine(name)

    def clone(self, config: CloneConfig, ctx: Optional[OperationContext] = None) -> VMRef:
        """Clone ``config.template`` into a new powered-off VM"""
        ctx = ensure_context(ctx)
        ctx.check(f"Cloning {config.vm_name}")

        source = self.finder.virtual_machine(config.template)
        folder = self.finder.folder_or_default(config.folder)
        pool = self.finder.resource_pool_or_default(config.host, config.resource_pool)
        datastore = self.finder.datastore(config.datastore) if config.datastore else None

        relocate_spec = vim.vm.RelocateSpec()
        relocate_spec.pool = pool.obj
        if datastore is not None:
            relocate_spec.datastore = datastore.obj
        if config.linked_clone:
            relocate_spec.diskMoveType = LINKED_CLONE_DISK_MOVE_TYPE

        clone_spec = vim.vm.CloneSpec()
        clone_spec.location = relocate_spec
        clone_spec.powerOn = False

        if config.linked_clone:
            with remote_call("Error reading base VM properties"):
                snapshot = source.obj.snapshot
            if snapshot is None:
                raise ConfigurationError("linked_clone is set, but the template VM has no snapshots")
            clone_spec.snapshot = snapshot.currentSnapshot

        logger.info(f"Cloning '{config.template}' to '{config.vm_name}'"
                    f"{' (linked)' if config.linked_clone else ''}")
        with remote_call(f"Cloning {config.vm_name}"):
            task = source.obj.Clone(folder=folder.obj, name=config.vm_name, spec=clone_spec)
        result = self.client.wait_for_task(task, ctx, f"Cloning {config.vm_name}")

        return VMRef(result)

    def destroy(self, vm: VMRef, ctx: Optional[OperationContext] = None) -> None:
        """Destroy a VM"""
        logger.info(f"Destroying VM '{vm.name}'")
        with remote_call(f"Destroying {vm.name}"):
            task = vm.obj.Destroy_Task()
        self.client.wait_for_task(task, ctx, f"Destroying {vm.name}")

    def reconfigure(self, vm: VMRef, hardware: HardwareConfig,
                    ctx: Optional[OperationContext] = None) -> None:
        """Apply CPU, memory and allocation settings in one reconfiguration"""
        errs = hardware.errors()
        if errs:
            raise ConfigurationError("Invalid hardware settings: " + "; ".join(errs),
                                     details={'errors': errs})

        spec = vim.vm.ConfigSpec()
        if hardware.cpus is not None:
            spec.numCPUs = hardware.cpus
        if hardware.ram is not None:
            spec.memoryMB = hardware.ram

        cpu_allocation = vim.ResourceAllocationInfo()
        if hardware.cpu_reservation is not None:
            cpu_allocation.reservation = hardware.cpu_reservation
        if hardware.cpu_limit is not None:
            cpu_allocation.limit = hardware.cpu_limit
        spec.cpuAllocation = cpu_allocation

        memory_allocation = vim.ResourceAllocationInfo()
        if hardware.ram_reservation is not None:
            memory_allocation.reservation = hardware.ram_reservation
        spec.memoryAllocation = memory_allocation

        spec.memoryReservationLockedToMax = hardware.ram_reserve_all

        logger.info(f"Reconfiguring VM '{vm.name}': cpus={hardware.cpus} ram={hardware.ram}MB")
        with remote_call(f"Reconfiguring {vm.name}"):
            task = vm.obj.ReconfigVM_Task(spec=spec)
        self.client.wait_for_task(task, ctx, f"Reconfiguring {vm.name}")

    def power_state(self, vm: VMRef, ctx: Optional[OperationContext] = None) -> str:
        """Current power state (poweredOn, poweredOff or suspended)"""
        ensure_context(ctx).check(f"Reading power state of {vm.name}")
        with remote_call(f"Reading power state of {vm.name}"):
            return vm.obj.runtime.powerState

    def power_on(self, vm: VMRef, ctx: Optional[OperationContext] = None) -> None:
        """Power on VM"""
        logger.info(f"Powering on VM '{vm.name}'")
        with remote_call(f"Powering on {vm.name}"):
            task = vm.obj.PowerOnVM_Task()
        self.client.wait_for_task(task, ctx, f"Powering on {vm.name}")

    def power_off(self, vm: VMRef, ctx: Optional[OperationContext] = None) -> None:
        """Power off VM; no-op when already off"""
        if self.power_state(vm, ctx) == vim.VirtualMachinePowerState.poweredOff:
            return

        logger.info(f"Powering off VM '{vm.name}'")
        with remote_call(f"Powering off {vm.name}"):
            task = vm.obj.PowerOffVM_Task()
        self.client.wait_for_task(task, ctx, f"Powering off {vm.name}")

    def start_shutdown(self, vm: VMRef, ctx: Optional[OperationContext] = None) -> None:
        """Ask the guest OS to shut down; returns without waiting"""
        ensure_context(ctx).check(f"Shutting down {vm.name}")
        logger.info(f"Requesting guest shutdown of VM '{vm.name}'")
        with remote_call(f"Shutting down guest of {vm.name}"):
            vm.obj.ShutdownGuest()

    def wait_for_shutdown(self, vm: VMRef, timeout: float,
                          ctx: Optional[OperationContext] = None) -> None:
        """Poll until the VM is powered off or ``timeout`` seconds pass.

        The outstanding guest shutdown request is left alone on timeout.
        """
        ctx = ensure_context(ctx).with_timeout(timeout)
        while True:
            if self.power_state(vm) == vim.VirtualMachinePowerState.poweredOff:
                break
            if ctx.expired():
                raise TimeoutError("Timeout while waiting for machine to shut down.",
                                   details={'vm': vm.name, 'timeout': timeout})
            ctx.check(f"Waiting for {vm.name} to shut down")
            logger.debug(f"Waiting for VM '{vm.name}' to power off")
            ctx.sleep(SHUTDOWN_POLL_INTERVAL)
        logger.info(f"VM '{vm.name}' is powered off")

    def wait_for_ip(self, vm: VMRef, ctx: Optional[OperationContext] = None) -> str:
        """Block until the guest reports an IP address"""
        ctx = ensure_context(ctx)
        while True:
            with remote_call(f"Waiting for IP of {vm.name}"):
                ip = vm.obj.guest.ipAddress
            if ip:
                logger.info(f"VM '{vm.name}' reported IP {ip}")
                return ip
            ctx.check(f"Waiting for IP of {vm.name}")
            ctx.sleep(IP_POLL_INTERVAL)

    def create_snapshot(self, vm: VMRef, ctx: Optional[OperationContext] = None) -> SnapshotRef:
        """Snapshot the VM without memory state or quiescing"""
        logger.info(f"Creating snapshot of VM '{vm.name}'")
        with remote_call(f"Creating snapshot of {vm.name}"):
            task = vm.obj.CreateSnapshot_Task(name=SNAPSHOT_NAME, description="",
                                              memory=False, quiesce=False)
        snapshot = self.client.wait_for_task(task, ctx, f"Creating snapshot of {vm.name}")
        return SnapshotRef(snapshot)

    def convert_to_template(self, vm: VMRef, ctx: Optional[OperationContext] = None) -> None:
        """Mark the VM as a template"""
        ensure_context(ctx).check(f"Converting {vm.name} to template")
        logger.info(f"Converting VM '{vm.name}' to template")
        with remote_call(f"Converting {vm.name} to template"):
            vm.obj.MarkAsTemplate()
