"""C2 Identity Service - credential issuance and verification."""

from tasksync.c2_identity_service.identity_service import IdentityService
from tasksync.c2_identity_service.passwords import hash_password, verify_password
from tasksync.c2_identity_service.tokens import TokenIssuer

__all__ = ["IdentityService", "TokenIssuer", "hash_password", "verify_password"]
