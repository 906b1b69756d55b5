"""
Example usage of the vsbuild library: clone a template, customize it and
turn the result into a new template
"""

import os
import logging
from vsbuild import (ConnectConfig, CloneConfig, HardwareConfig, OperationContext,
                     establish)

logging.basicConfig(level=logging.INFO)

# Use environment variables for security: export VSPHERE_PASSWORD=your_password
config = ConnectConfig(
    vcenter_server="vcenter.example.com",
    username="administrator@vsphere.local",
    password=os.getenv("VSPHERE_PASSWORD", "your_password_here"),
    datacenter="DC1",
    insecure_connection=True  # For testing only
)

# Bound the whole build to one hour
ctx = OperationContext.with_deadline_in(3600)

with establish(config, ctx) as driver:
    vm = driver.clone(CloneConfig(
        template="ubuntu-22.04-base",
        vm_name="ubuntu-22.04-build",
        folder="Builds",
        host="esxi-01.example.com",
        linked_clone=True
    ), ctx)

    driver.reconfigure(vm, HardwareConfig(cpus=4, ram=8192, ram_reserve_all=True), ctx)

    driver.power_on(vm, ctx)
    print(f"VM {vm.name} is up at {driver.wait_for_ip(vm, ctx)}")

    # Provisioning over SSH would happen here

    driver.start_shutdown(vm, ctx)
    driver.wait_for_shutdown(vm, timeout=300, ctx=ctx)

    driver.create_snapshot(vm, ctx)
    driver.convert_to_template(vm, ctx)
    print(f"Template {vm.name} is ready")
