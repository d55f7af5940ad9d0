import base64
from dataclasses import dataclass
from typing import Any, Optional, Literal, Union
from pydantic import BaseModel, ConfigDict, model_validator

# ---- Store Records ----

class User(BaseModel):
    """A row of the Users relation.

    Columns other than user_id and username are opaque to the server and
    are passed through under their column names. SQLite columns can hold
    any storage class, so BLOB values come out as base64 text.
    """
    model_config = ConfigDict(extra="allow")

    user_id: Union[int, str, float]
    username: Optional[Union[str, int, float]] = None

    @model_validator(mode="before")
    @classmethod
    def encode_blobs(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {
                key: base64.b64encode(value).decode("ascii") if isinstance(value, bytes) else value
                for key, value in data.items()
            }
        return data

# ---- Lookup Modes ----

@dataclass(frozen=True)
class ByIdLookup:
    """Look up the user whose user_id equals the given path segment."""
    user_id: str

@dataclass(frozen=True)
class DefaultLookup:
    """Look up the first user carrying the sentinel username."""

Lookup = Union[ByIdLookup, DefaultLookup]

# ---- Response Models ----

class ErrorResponse(BaseModel):
    error: str

class HealthResponse(BaseModel):
    status: Literal["ok", "degraded"]
    version: str
    database: Literal["connected", "unavailable"]
    timestamp: int
