"""
Error taxonomy shared by the template and translation packages.
"""
from typing import Any, Optional


class TechDocError(Exception):
    """Base class for all template/translation errors"""


class SchemaError(TechDocError):
    """Template is structurally invalid (unresolved reference, collision, ...)"""

    def __init__(
        self,
        message: str,
        section_id: Optional[str] = None,
        placeholder: Optional[str] = None
    ):
        self.section_id = section_id
        self.placeholder = placeholder
        details = []
        if section_id is not None:
            details.append(f"section '{section_id}'")
        if placeholder is not None:
            details.append(f"placeholder '{placeholder}'")
        if details:
            message = f"{message} ({', '.join(details)})"
        super().__init__(message)


class NotFoundError(TechDocError, KeyError):
    """Lookup miss for a section, placeholder, style or template"""

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key}")

    def __str__(self) -> str:
        # KeyError would repr() the message
        return self.args[0]


class MissingFieldError(TechDocError):
    """A required section references a placeholder with no supplied value"""

    def __init__(self, placeholder: str, section_id: str):
        self.placeholder = placeholder
        self.section_id = section_id
        super().__init__(
            f"Missing value for required placeholder '{placeholder}' "
            f"in section '{section_id}'"
        )


class InvalidFieldValueError(TechDocError):
    """A supplied value does not parse as its declared placeholder kind"""

    def __init__(self, placeholder: str, section_id: str, kind: str, value: Any):
        self.placeholder = placeholder
        self.section_id = section_id
        self.kind = kind
        self.value = value
        super().__init__(
            f"Invalid {kind} value for placeholder '{placeholder}' "
            f"in section '{section_id}': {value!r}"
        )


class UnsupportedLanguageError(TechDocError):
    """Language outside the supported set"""

    def __init__(self, language: str, supported: Optional[Any] = None):
        self.language = language
        message = f"Unsupported language: {language}"
        if supported:
            message += f" (supported: {', '.join(sorted(supported))})"
        super().__init__(message)
