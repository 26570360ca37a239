"""
Custom exception types for the CortexOps role composer.
Maps composition error codes (6001-6999) to exception classes.

Errors carry a category so callers can tell user input problems
("input") apart from catalog configuration problems ("catalog").
"""

INPUT_ERROR = "input"
CATALOG_ERROR = "catalog"
SERVICE_ERROR = "service"


class CompositionError(Exception):
    """Base exception for role composition errors."""

    category = CATALOG_ERROR

    def __init__(self, error_code: int, message: str, context: dict | None = None):
        """
        Initialize composition error.

        Args:
            error_code: Error code in range 6001-6999
            message: Human-readable error message
            context: Additional context dict with details
        """
        self.error_code = error_code
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return formatted error string for logging."""
        context_str = f" | Context: {self.context}" if self.context else ""
        return f"[{self.error_code}] {self.message}{context_str}"

    @property
    def is_input_error(self) -> bool:
        return self.category == INPUT_ERROR


class EmptySelectionError(CompositionError):
    """6001: No roles were selected."""

    category = INPUT_ERROR

    def __init__(self, message: str = "At least one role must be selected", context: dict | None = None):
        super().__init__(6001, message, context)


class UnknownRoleIdError(CompositionError):
    """6002: Role id is absent from both the specialized and generic tables."""

    def __init__(self, role_id: str, context: dict | None = None):
        self.role_id = role_id
        super().__init__(6002, f"Unknown role id: '{role_id}'", context)


class DuplicateArtifactNameError(CompositionError):
    """6003: Two distinct role ids resolved to artifacts with the same name."""

    def __init__(self, name: str, first_role_id: str, second_role_id: str):
        self.name = name
        super().__init__(
            6003,
            f"Roles '{first_role_id}' and '{second_role_id}' both resolve to artifact '{name}'",
            {"name": name, "role_ids": [first_role_id, second_role_id]},
        )


class InvalidEnvironmentError(CompositionError):
    """6004: Environment value outside {staging, production}."""

    category = INPUT_ERROR

    def __init__(self, value: object, context: dict | None = None):
        self.value = value
        super().__init__(
            6004,
            f"Invalid environment '{value}', expected 'staging' or 'production'",
            context,
        )


class TemplateRenderError(CompositionError):
    """6005: A role resource is missing or fails to render."""

    def __init__(self, message: str = "Template rendering failed", context: dict | None = None):
        super().__init__(6005, message, context)


class QuotaExceededError(CompositionError):
    """6101: The caller has no generations left."""

    category = SERVICE_ERROR

    def __init__(self, user_id: str, context: dict | None = None):
        self.user_id = user_id
        super().__init__(6101, f"Generation quota reached for user '{user_id}'", context)


class GenerationRecordError(CompositionError):
    """6102: The persistence collaborator refused to record a generation."""

    category = SERVICE_ERROR

    def __init__(self, message: str = "Failed to record generation", context: dict | None = None):
        super().__init__(6102, message, context)
