"""
vsbuild Library Exceptions
"""

class VSBuildError(Exception):
    """Base exception for all vsbuild errors"""
    def __init__(self, message, code=None, details=None):
        super().__init__(message)
        self.code = code
        self.details = details or {}


class ConnectionError(VSBuildError):
    """Session establishment errors"""
    pass


class AuthenticationError(ConnectionError):
    """Authentication failure"""
    pass


class ResolutionError(VSBuildError):
    """Named inventory object not found or ambiguous"""
    pass


class ConfigurationError(VSBuildError):
    """Semantically invalid request or configuration"""
    pass


class RemoteTaskError(VSBuildError):
    """Asynchronous vSphere task reported failure"""
    pass


class RemoteCallError(VSBuildError):
    """Synchronous vSphere call failed"""
    pass


class TimeoutError(VSBuildError):
    """Operation timeout"""
    pass


class CancelledError(VSBuildError):
    """Operation cancelled by its context"""
    pass
