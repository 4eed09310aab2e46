"""Wire models for snapshots, action targets and action results."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class Verbosity(str, Enum):
    MINIMAL = "minimal"
    NORMAL = "normal"
    DETAILED = "detailed"


class RefElement(BaseModel):
    ref: str = Field(..., description="Per-snapshot element id, e.g. 'r5'.")
    role: str = Field(..., description="Explicit or implicit ARIA role.")
    name: str = Field("", description="Accessible name, truncated.")
    value: Optional[str] = Field(None, description="Current control value.")
    disabled: Optional[bool] = Field(None, description="Present only when the element is disabled.")
    checked: Optional[bool] = Field(None, description="Checkbox/radio or aria-checked state.")
    expanded: Optional[bool] = Field(None, description="aria-expanded state.")
    options: Optional[List[str]] = Field(None, description="Option labels of a <select>.")
    description: Optional[str] = Field(None, description="aria-describedby text.")


class PageSnapshot(BaseModel):
    url: str = ""
    title: str = ""
    refs: List[RefElement] = Field(default_factory=list)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class ActionTarget(BaseModel):
    ref: Optional[str] = Field(None, description="Preferred: ref from the latest snapshot.")
    selector: Optional[str] = Field(None, description="Fallback CSS selector.")

    @field_validator("ref", "selector", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def is_empty(self) -> bool:
        return not self.ref and not self.selector


class ActionResult(BaseModel):
    success: bool
    snapshot: PageSnapshot
    url: str

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)
