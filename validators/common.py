from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ValidationResult(BaseModel):
    """Outcome of a validator: errors block, warnings are advisory only."""
    is_valid: bool = True
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    field_errors: Dict[str, List[str]] = Field(default_factory=dict)
    data: Optional[Any] = None

    def add_error(self, message: str, field: Optional[str] = None) -> None:
        self.errors.append(message)
        if field:
            self.field_errors.setdefault(field, []).append(message)
        self.is_valid = False

    def merge(self, other: "ValidationResult") -> None:
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        for field, messages in other.field_errors.items():
            self.field_errors.setdefault(field, []).extend(messages)
        if not other.is_valid:
            self.is_valid = False


def pydantic_errors(exc) -> Dict[str, List[str]]:
    """pydantic ValidationError -> {dotted.field: [messages]}"""
    out: Dict[str, List[str]] = {}
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ())) or "__root__"
        out.setdefault(field, []).append(err.get("msg", "Invalid value"))
    return out
