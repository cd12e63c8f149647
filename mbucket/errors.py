"""Exceptions raised by mbucket commands."""


class MbucketError(Exception):
    """Base class for all mbucket errors"""
    pass


class UsageError(MbucketError):
    """Wrong argument count or bad flag combination"""
    pass


class StorageUriError(UsageError):
    pass


class ConfigError(MbucketError):
    pass


class InvalidTargetError(MbucketError):
    """The raw request path carries a host or a port"""
    pass


class UnknownMethodError(MbucketError):
    pass


class MalformedHeaderError(MbucketError):
    pass


class SigningError(MbucketError):
    pass


class TransportError(MbucketError):
    """Network failure while sending a request or reading its body"""
    pass


class RequestFailedError(MbucketError):
    """A HEAD request was answered with an HTTP error status"""

    def __init__(self, status_code: int, reason: str, path: str):
        super().__init__(f"HEAD {path} failed: {status_code} {reason}")
        self.status_code = status_code
        self.reason = reason
        self.path = path
