"""
Core Application - Infrastructure & Base Classes

Generic base classes shared by the domain apps. Nothing in here knows
about transfers, shops or Stripe.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Model Mixins (import from core.model_mixins):
    - UUIDPrimaryKeyMixin: UUID as primary key
    - VersionedModelMixin: Version counter for optimistic locking

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - ConflictError: State conflicts (duplicates, concurrent modification)
    - ExternalServiceError: Third-party service failures
"""
