"""Errors raised while talking to the container runtime."""


class RuntimeClientError(Exception):
    """Base class for container runtime failures."""


class ConnectionFailure(RuntimeClientError):
    """The Docker daemon could not be reached."""


class MalformedRecordError(RuntimeClientError):
    """A container record lacks data required to process it."""


class OperationFailure(RuntimeClientError):
    """The daemon rejected an otherwise well-formed request."""
