"""
Ports - Interfaces for durable storage and the remote authority.

Hexagonal architecture: These define WHAT we need, not HOW.
Adapters provide the HOW.
"""

from session_auth.ports.storage_port import StoragePort
from session_auth.ports.auth_port import AuthenticationPort, AuthResponse

__all__ = [
    "StoragePort",
    "AuthenticationPort",
    "AuthResponse",
]
