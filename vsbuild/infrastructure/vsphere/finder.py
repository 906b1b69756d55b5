"""
Name and inventory-path resolution scoped to a datacenter
"""

import logging
from typing import Any, List, Optional
from pyVmomi import vim
from .client import remote_call
from .refs import (VMRef, FolderRef, ResourcePoolRef, DatastoreRef,
                   DatacenterRef)
from ...exceptions import ResolutionError

logger = logging.getLogger(__name__)


class Finder:
    """Resolve inventory objects by name or path

    Plain names are searched below the bound datacenter; names containing
    a slash are treated as inventory paths relative to it (or absolute
    when they start with a slash).
    """

    def __init__(self, content):
        self.content = content
        self._datacenter = None

    @property
    def datacenter(self):
        if self._datacenter is None:
            raise ResolutionError("Finder is not bound to a datacenter")
        return self._datacenter

    def set_datacenter(self, datacenter: DatacenterRef) -> None:
        """Bind all subsequent lookups to ``datacenter``"""
        self._datacenter = datacenter.obj

    def _find_all(self, container, vimtype: List, name: Optional[str] = None) -> List[Any]:
        """Objects of ``vimtype`` below ``container``, optionally filtered by name"""
        view = self.content.viewManager.CreateContainerView(container, vimtype, True)
        try:
            return [obj for obj in view.view if name is None or obj.name == name]
        finally:
            view.Destroy()

    def _find_one(self, container, vimtype: List, name: str, kind: str) -> Any:
        with remote_call(f"Resolving {kind} '{name}'"):
            matches = self._find_all(container, vimtype, name)
        if not matches:
            raise ResolutionError(f"{kind} '{name}' not found")
        if len(matches) > 1:
            raise ResolutionError(f"{kind} '{name}' resolves to {len(matches)} objects")
        return matches[0]

    def _find_by_path(self, path: str, vimtype, kind: str) -> Any:
        with remote_call(f"Resolving {kind} '{path}'"):
            obj = self.content.searchIndex.FindByInventoryPath(path)
        if obj is None or not isinstance(obj, vimtype):
            raise ResolutionError(f"{kind} '{path}' not found")
        return obj

    def _path(self, section: str, path: str) -> str:
        """Inventory path of ``path`` inside a datacenter section (vm, host, ...)"""
        if path.startswith('/'):
            return path.strip('/')
        parts = [self.datacenter.name, section] + [p for p in path.split('/') if p]
        return '/'.join(parts)

    def datacenter_or_default(self, name: str = "") -> DatacenterRef:
        """Named datacenter, or the only datacenter when no name is given"""
        root = self.content.rootFolder
        if name:
            dc = self._find_one(root, [vim.Datacenter], name, "Datacenter")
        else:
            with remote_call("Listing datacenters"):
                datacenters = self._find_all(root, [vim.Datacenter])
            if not datacenters:
                raise ResolutionError("No datacenters found")
            if len(datacenters) > 1:
                raise ResolutionError(
                    f"Default datacenter resolves to {len(datacenters)} datacenters, "
                    f"a datacenter name is required")
            dc = datacenters[0]
        logger.info(f"Using datacenter '{dc.name}'")
        return DatacenterRef(dc)

    def virtual_machine(self, name: str) -> VMRef:
        """VM or template by name or inventory path"""
        if '/' in name:
            return VMRef(self._find_by_path(self._path('vm', name),
                                            vim.VirtualMachine, "VM"))
        return VMRef(self._find_one(self.datacenter.vmFolder, [vim.VirtualMachine],
                                    name, "VM"))

    def folder_or_default(self, path: str = "") -> FolderRef:
        """VM folder at ``path``, the datacenter VM folder when empty"""
        if not path.strip('/'):
            return FolderRef(self.datacenter.vmFolder)
        return FolderRef(self._find_by_path(self._path('vm', path), vim.Folder, "Folder"))

    def resource_pool_or_default(self, host: str = "", pool: str = "") -> ResourcePoolRef:
        """Resource pool on ``host``, by name, or the datacenter default

        With a host the pool is looked up under the host's ``Resources``
        root pool; with only a pool name it is searched across the
        datacenter; with neither the first compute resource's root pool
        is used.
        """
        if host:
            path = self._path('host', f"{host}/Resources/{pool}")
            return ResourcePoolRef(self._find_by_path(path, vim.ResourcePool, "Resource pool"))
        if pool:
            return ResourcePoolRef(self._find_one(self.datacenter.hostFolder,
                                                  [vim.ResourcePool], pool, "Resource pool"))
        return ResourcePoolRef(self._default_resource_pool())

    def _default_resource_pool(self):
        with remote_call("Resolving default resource pool"):
            compute = self._find_all(self.datacenter.hostFolder, [vim.ComputeResource])
        for resource in compute:
            if resource.resourcePool is not None:
                return resource.resourcePool
        raise ResolutionError("No resource pool found")

    def datastore(self, name: str) -> DatastoreRef:
        """Datastore by name or inventory path"""
        if '/' in name:
            return DatastoreRef(self._find_by_path(self._path('datastore', name),
                                                   vim.Datastore, "Datastore"))
        return DatastoreRef(self._find_one(self.datacenter.datastoreFolder,
                                           [vim.Datastore], name, "Datastore"))
