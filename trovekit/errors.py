"""Exception hierarchy."""


class TroveKitError(Exception):
    """Base class for library failures."""


class RpcError(TroveKitError):
    """A JSON-RPC call failed: transport error, HTTP error or node error object."""


class PreconditionError(TroveKitError):
    """The API was used out of order or on an object in the wrong state."""
