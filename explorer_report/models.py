from dataclasses import dataclass, field
from typing import Any, Optional, Union

# JSON value kinds a result cell can hold.
JsonValue = Union[None, bool, int, float, str, list[Any], dict[str, Any]]


@dataclass
class QueryResult:
    """Result set returned by a Data Explorer query run."""
    columns: list[str]
    rows: list[list[JsonValue]]
    result_count: int = 0
    duration: float = 0.0  # milliseconds
    success: bool = True
    errors: list[str] = field(default_factory=list)
    params: dict[str, str] = field(default_factory=dict)
    colrender: dict[str, str] = field(default_factory=dict)  # column -> render type
    relations: dict[str, list[dict]] = field(default_factory=dict)
    default_limit: Optional[int] = None

    @property
    def has_errors(self) -> bool:
        return not self.success or bool(self.errors)

    @classmethod
    def from_dict(cls, data: dict) -> "QueryResult":
        return cls(
            columns=data["columns"],
            rows=data["rows"],
            result_count=data.get("result_count", 0),
            duration=data.get("duration", 0.0),
            success=data.get("success", True),
            errors=data.get("errors") or [],
            params=data.get("params") or {},
            colrender=data.get("colrender") or {},
            relations=data.get("relations") or {},
            default_limit=data.get("default_limit"),
        )
