"""
Credential vault - encrypted storage with environment fallbacks.
"""

from .models import CredentialSet, MaskedField, Service, ENV_VARS, SERVICE_FIELDS
from .store import CredentialStore
from .resolver import CredentialResolver, mask_value

__all__ = [
    # Models
    "CredentialSet",
    "MaskedField",
    "Service",
    "ENV_VARS",
    "SERVICE_FIELDS",
    # Store
    "CredentialStore",
    # Resolver
    "CredentialResolver",
    "mask_value",
]
