"""
Database Services Package
-------------------------
Credential store for the auth service.

This package provides:
- Base service class with session access and storage error classification
- Users service (credential lookup and creation)
"""

from ats_auth.psql_db_services.base_service import (
    BaseDatabaseService,
    CredentialStoreError,
    StoreErrorKind,
)
from ats_auth.psql_db_services.users_service import UsersService

__all__ = [
    "BaseDatabaseService",
    "CredentialStoreError",
    "StoreErrorKind",
    "UsersService",
]
