"""Custom exception classes for kitty-deploy library."""


class KittyError(Exception):
    """Base exception for action pipeline errors."""

    pass


class ConfigError(KittyError, ValueError):
    """Raised when the scripts config cannot be parsed or validated."""

    pass


class ConfigNotFoundError(KittyError, FileNotFoundError):
    """Raised when no scripts config file can be located."""

    pass


class NetworkNotFoundError(KittyError, ValueError):
    """Raised when the active network has no section in the scripts config."""

    pass


class ContractNotFoundError(KittyError, ValueError):
    """Raised when a contract source file or deployment record is missing."""

    pass


class ArtifactNotFoundError(KittyError, FileNotFoundError):
    """Raised when no compiled artifact exists for a contract."""

    pass


class FunctionNotFoundError(KittyError, ValueError):
    """Raised when a function is absent from a deployed contract's ABI."""

    pass


class RpcError(KittyError, RuntimeError):
    """Raised when a JSON-RPC request fails or returns an error."""

    pass
