"""
Custom Exceptions for DiagramForge
==================================

Use these instead of generic Exception to:
1. Make errors more specific and debuggable
2. Map failures to the right HTTP status at the API layer
3. Provide meaningful error messages to users

Usage:
    from app.core.exceptions import DiagramNotFoundError, EmptyArchiveError

    if not diagram:
        raise DiagramNotFoundError(diagram_id)

    try:
        archiver.create(project_dir, zip_path)
    except EmptyArchiveError as e:
        logger.error(f"Archive failed: {e}")
        raise
"""

from typing import Optional, Any, Dict, List


class DiagramForgeError(Exception):
    """Base exception for all DiagramForge errors"""

    http_status: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(DiagramForgeError):
    """Base class for not found errors"""

    http_status = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with id {resource_id} not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class DiagramNotFoundError(ResourceNotFoundError):
    """Diagram not found"""

    def __init__(self, diagram_id: str):
        super().__init__("Diagram", diagram_id)


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(DiagramForgeError):
    """Input validation failed"""

    http_status = 422

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class DiagramValidationError(ValidationError):
    """Diagram model is structurally malformed"""

    def __init__(self, errors: List[Dict[str, Any]]):
        count = len(errors)
        super().__init__(f"Diagram model is invalid ({count} error{'s' if count != 1 else ''})")
        self.code = "INVALID_DIAGRAM_MODEL"
        self.errors = errors
        self.details = {"errors": errors}


# ============================================
# Code Generation Errors
# ============================================

class CodeGenerationError(DiagramForgeError):
    """Project generation failed"""

    def __init__(self, message: str, class_name: Optional[str] = None):
        super().__init__(message, code="CODE_GENERATION_FAILED")
        if class_name:
            self.details["class_name"] = class_name


class ModelConflictError(CodeGenerationError):
    """Two edges claim the same inheritance child or composition part"""

    http_status = 409

    def __init__(self, kind: str, class_name: str, previous: str, current: str):
        super().__init__(
            f"{class_name} is the target of more than one {kind} edge "
            f"({previous} and {current})",
            class_name=class_name,
        )
        self.code = "MODEL_CONFLICT"
        self.details.update({"kind": kind, "previous": previous, "current": current})


class TemplateUnavailableError(CodeGenerationError):
    """Scaffold location exists but cannot be used"""

    def __init__(self, template_dir: str, reason: str):
        super().__init__(f"Project template at {template_dir} is unusable: {reason}")
        self.code = "TEMPLATE_UNAVAILABLE"
        self.details["template_dir"] = template_dir


# ============================================
# Archive Errors
# ============================================

class ArchiveError(DiagramForgeError):
    """Archive creation failed"""

    def __init__(self, message: str, archive_path: Optional[str] = None):
        super().__init__(message, code="ARCHIVE_ERROR")
        if archive_path:
            self.details["archive_path"] = archive_path


class EmptyArchiveError(ArchiveError):
    """Generated archive has no content"""

    def __init__(self, archive_path: str):
        super().__init__("Generated zip is empty", archive_path=archive_path)
        self.code = "EMPTY_ARCHIVE"


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: DiagramForgeError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "error": error.to_dict()
    }
