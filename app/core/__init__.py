"""
Core Application - Infrastructure & Base Classes

Generic, reusable building blocks shared by the domain apps
(authentication, social, chat). Nothing here knows about friends,
chats or messages.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Model Mixins (import from core.model_mixins):
    - UUIDPrimaryKeyMixin: UUID as primary key

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for success/failure handling

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - ValidationError, AuthenticationError, PermissionDeniedError,
      NotFoundError, ConflictError
    - status_for_error_code: Error code to HTTP status mapping
    - api_exception_handler: DRF exception handler

Views (import from core.views):
    - health_check: Database/cache health endpoint
    - error_response: Render a failed ServiceResult
    - validation_error_response: Render serializer errors the same way
"""
