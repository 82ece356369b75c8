"""
Core Application - Infrastructure & Base Classes

Generic building blocks used by the payment broker. Nothing in this package
knows about gateways or transactions.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)
    - UUIDPrimaryKeyMixin: UUID as primary key
    - VersionedModel: Optimistic locking version counter

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for success/failure handling

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - ConflictError, ConfigurationError

Views (import from core.views):
    - health_check: Database connectivity probe
"""
