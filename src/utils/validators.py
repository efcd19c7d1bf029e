"""Pattern document schema validation.

Pattern documents are the plain-data boundary between format-specific
readers/writers and the stitch engine (schema ``pattern.v1``)::

    schema: pattern.v1
    metadata: {name: rose, author: ...}
    threads:
      - {description: Red, colour: 0xFF0000, catalog_number: "1147", brand: Madeira}
    stitches:
      - {x: 0, y: 0, command: 0}       # packed 32-bit command word
      - {x: 25, y: -10, command: 1}

All validation goes through pydantic so readers fail fast with the
offending index and field in the message, instead of the engine failing
later on a malformed stitch.

Usage:
    from src.utils import validators
    doc = validators.load_pattern_file("rose.yaml")
    doc = validators.validate_pattern_document(raw_dict)
"""

import math
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


PATTERN_SCHEMA = "pattern.v1"

U32_MAX = 0xFFFFFFFF


class PatternFileError(ValueError):
    """Raised when a pattern document fails schema validation."""

    pass


# ============================================================================
# PATTERN SCHEMA V1
# ============================================================================

class StitchRecord(BaseModel):
    """One stitch event: coordinates plus packed command word."""
    model_config = ConfigDict(extra="forbid")

    x: Union[int, float] = Field(..., description="X in pattern units")
    y: Union[int, float] = Field(..., description="Y in pattern units")
    command: int = Field(..., ge=0, le=U32_MAX, description="Packed 32-bit command word")

    @field_validator('x', 'y')
    @classmethod
    def validate_finite(cls, v: Union[int, float]) -> Union[int, float]:
        if isinstance(v, float) and not math.isfinite(v):
            raise ValueError(f"Coordinate must be finite, got {v}")
        return v


class ThreadRecord(BaseModel):
    """Thread / material descriptor."""
    description: str = Field("", description="Free-form thread name")
    colour: Optional[int] = Field(None, ge=0, le=0xFFFFFF, description="0xRRGGBB")
    catalog_number: Optional[str] = Field(None, description="Manufacturer catalogue number")
    brand: Optional[str] = Field(None, description="Manufacturer")


class PatternFileV1(BaseModel):
    """Complete pattern document (pattern.v1)."""
    model_config = ConfigDict(populate_by_name=True)

    schema_version: str = Field(PATTERN_SCHEMA, alias="schema", description="Schema version")
    metadata: Dict[str, Any] = Field(default_factory=dict)
    threads: List[ThreadRecord] = Field(default_factory=list)
    stitches: List[StitchRecord] = Field(default_factory=list)

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != PATTERN_SCHEMA:
            raise ValueError(f"Expected schema '{PATTERN_SCHEMA}', got '{v}'")
        return v


# ============================================================================
# PUBLIC API
# ============================================================================

def validate_pattern_document(data: Any, source: str = "<document>") -> PatternFileV1:
    """Validate an already-parsed pattern document.

    Parameters
    ----------
    data : Any
        Parsed YAML/JSON content.
    source : str
        Label used in error messages (usually the file path).

    Returns
    -------
    PatternFileV1
        Validated document.

    Raises
    ------
    PatternFileError
        If the document is not a mapping or fails validation.
    """
    if not isinstance(data, dict):
        raise PatternFileError(
            f"Pattern document {source} must be a mapping, got {type(data).__name__}"
        )
    try:
        return PatternFileV1.model_validate(data)
    except ValidationError as e:
        raise PatternFileError(f"Pattern validation failed at {source}: {e}") from e


def load_pattern_file(path: Union[str, Path]) -> PatternFileV1:
    """Load and validate a pattern document from YAML or JSON.

    Parameters
    ----------
    path : Union[str, Path]
        Path to a ``.yaml``, ``.yml`` or ``.json`` file.

    Returns
    -------
    PatternFileV1
        Validated document.

    Raises
    ------
    FileNotFoundError
        If path doesn't exist
    PatternFileError
        If validation fails (with the offending field in the message)
    """
    from . import fs

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Pattern file not found: {path}")

    data = fs.load_document(path)
    return validate_pattern_document(data, source=str(path))
