from dataclasses import dataclass, field
from typing import Any, List


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    value: Any = None

    @classmethod
    def success(cls, value: Any = None):
        return cls(is_valid=True, errors=[], value=value)

    @classmethod
    def failure(cls, errors: List[str]):
        return cls(is_valid=False, errors=list(errors))
