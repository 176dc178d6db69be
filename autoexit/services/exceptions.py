class RpcError(Exception):
    """A single JSON-RPC call failed (transport, HTTP status or application error)."""


class RpcRateLimitedError(RpcError):
    """The RPC endpoint answered with a rate limit signature."""


class NoApiConfigurationError(Exception):
    """There is no enabled API configuration at all."""


class AuthenticationError(Exception):
    """The caller's bearer token is missing or could not be verified."""
