"""
vSphere Client wrapper: authenticated session and task waiting
"""

import ssl
import atexit
import logging
from contextlib import contextmanager
from typing import Optional, Any
from urllib.parse import urlsplit
from pyVim import connect
from pyVmomi import vim, vmodl
from ...config import ConnectConfig
from ...context import OperationContext, ensure_context
from ...exceptions import (ConnectionError, AuthenticationError, ConfigurationError,
                           RemoteTaskError, RemoteCallError)

logger = logging.getLogger(__name__)

DEFAULT_PORT = 443
TASK_POLL_INTERVAL = 0.5


def fault_message(fault: Any) -> str:
    """Best human-readable message carried by a vSphere fault"""
    for attr in ('msg', 'localizedMessage'):
        message = getattr(fault, attr, None)
        if message:
            return str(message)
    return str(fault)


@contextmanager
def remote_call(operation: str):
    """Wrap vSphere faults raised by a synchronous call as RemoteCallError"""
    try:
        yield
    except vmodl.MethodFault as e:
        raise RemoteCallError(f"{operation}: {fault_message(e)}",
                              details={'fault': e}) from e


class VSphereClient:
    """vSphere API client for VM operations"""

    def __init__(self, host: str, username: str, password: str, port: int = DEFAULT_PORT,
                 disable_ssl_verification: bool = False):
        self.host = host
        self.username = username
        self.password = password
        self.port = port
        self.disable_ssl_verification = disable_ssl_verification
        self._service_instance = None
        self._content = None

    @classmethod
    def from_config(cls, config: ConnectConfig) -> "VSphereClient":
        """Build a client from ``ConnectConfig``; the server may carry a port"""
        parts = urlsplit(f"//{config.vcenter_server}")
        try:
            port = parts.port or DEFAULT_PORT
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid vcenter_server '{config.vcenter_server}': {e}") from e
        return cls(
            host=parts.hostname or config.vcenter_server,
            username=config.username,
            password=config.password,
            port=port,
            disable_ssl_verification=config.insecure_connection,
        )

    def connect(self) -> None:
        """Establish connection to vSphere"""
        try:
            context = None
            if self.disable_ssl_verification:
                # Lab environments may need unverified SSL context
                context = ssl._create_unverified_context()  # nosec B323

            self._service_instance = connect.SmartConnect(
                host=self.host,
                user=self.username,
                pwd=self.password,
                port=self.port,
                path="/sdk",
                sslContext=context
            )

        except vim.fault.InvalidLogin as e:
            raise AuthenticationError(f"Failed to authenticate to vSphere {self.host}") from e
        except Exception as e:
            raise ConnectionError(f"Failed to connect to vSphere: {str(e)}") from e

        try:
            self._content = self._service_instance.RetrieveContent()
        except Exception as e:
            connect.Disconnect(self._service_instance)
            self._service_instance = None
            raise ConnectionError(f"Failed to retrieve vSphere content: {str(e)}") from e
        atexit.register(self.disconnect)

        logger.info(f"Connected to vSphere {self.host}:{self.port} as {self.username}")

    def disconnect(self) -> None:
        """Disconnect from vSphere"""
        if self._service_instance:
            connect.Disconnect(self._service_instance)
            atexit.unregister(self.disconnect)
            self._service_instance = None
            self._content = None
            logger.info(f"Disconnected from vSphere {self.host}")

    @property
    def connected(self) -> bool:
        return self._content is not None

    @property
    def content(self):
        """Get vSphere content object"""
        if not self._content:
            raise ConnectionError("Not connected to vSphere")
        return self._content

    def wait_for_task(self, task: vim.Task, ctx: Optional[OperationContext] = None,
                      operation: str = "task") -> Any:
        """Block until a vSphere task finishes and return its result.

        Polls ``task.info.state`` every ``TASK_POLL_INTERVAL`` seconds. The
        context bounds the wait; the remote task itself keeps running if the
        wait is abandoned.
        """
        ctx = ensure_context(ctx)
        with remote_call(operation):
            state = task.info.state
        while state not in [vim.TaskInfo.State.success,
                            vim.TaskInfo.State.error]:
            ctx.check(operation)
            logger.debug(f"Waiting for {operation} ({state})")
            ctx.sleep(TASK_POLL_INTERVAL)
            with remote_call(operation):
                state = task.info.state

        if state == vim.TaskInfo.State.error:
            with remote_call(operation):
                error = task.info.error
                key = task.info.key
            raise RemoteTaskError(f"{operation} failed: {fault_message(error)}",
                                  details={'fault': error, 'task': key})

        with remote_call(operation):
            return task.info.result
