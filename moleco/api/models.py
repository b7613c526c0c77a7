"""Pydantic models for API requests and responses."""
from pydantic import BaseModel, Field, validator
from typing import List, Optional, Dict

from moleco.config import settings


class SwatchRequest(BaseModel):
    """Request model for a single swatch."""
    identifier: str = Field(..., description="InChI or MInChI string")
    strict_version_check: Optional[bool] = Field(
        default=None,
        description="Reject unsupported format versions (defaults to server setting)"
    )

    @validator('identifier')
    def validate_identifier(cls, v):
        """Reject blank identifiers before parsing."""
        if not v or not v.strip():
            raise ValueError("Identifier must be a non-empty string")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "identifier": "MInChI=0.00.1S/CH2O/c1-2/h1H2&CH4O/c1-2/h2H,1H3&H2O/h1H2"
                              "/n{{1&3}&2}/g{{37wf-2&}&10:15pp0}",
                "strict_version_check": True
            }
        }


class BatchSwatchRequest(BaseModel):
    """Request model for batch swatches."""
    identifiers: List[str] = Field(..., description="List of InChI or MInChI strings")
    strict_version_check: Optional[bool] = None

    @validator('identifiers')
    def validate_identifiers(cls, v):
        """Validate batch size."""
        if len(v) == 0:
            raise ValueError("At least one identifier must be provided")
        if len(v) > settings.max_batch_size:
            raise ValueError(f"Maximum {settings.max_batch_size} identifiers per batch request")
        return v


class ColorsRequest(BaseModel):
    """Request model for color schemes of substances."""
    identifiers: List[str] = Field(..., description="InChI strings or bare substance layers")
    format: str = Field(default="json", description="'json' or 'csv'")

    @validator('identifiers')
    def validate_identifiers(cls, v):
        """Validate identifier list."""
        if len(v) == 0:
            raise ValueError("At least one identifier must be provided")
        if len(v) > settings.max_batch_size:
            raise ValueError(f"Maximum {settings.max_batch_size} identifiers per request")
        if any(not item for item in v):
            raise ValueError("Identifiers must be non-empty strings")
        return v

    @validator('format')
    def validate_format(cls, v):
        """Validate output format."""
        if v not in ("json", "csv"):
            raise ValueError("Format must be 'json' or 'csv'")
        return v


class ColorModel(BaseModel):
    """Model for one color."""
    lightness: float
    chroma: float
    hue: float
    hex: str
    rgb: List[int]


class SegmentModel(BaseModel):
    """Model for one rendered segment."""
    component_index: int
    identifier: str
    proportion: float
    depth: int
    color: ColorModel


class SwatchResponse(BaseModel):
    """Response model for a swatch."""
    success: bool
    identifier: str
    notation: Optional[str] = None
    version: Optional[str] = None
    components: Optional[List[str]] = None
    segments: Optional[List[SegmentModel]] = None
    totals: Optional[Dict[int, float]] = None
    processing_time: Optional[float] = None
    error: Optional[str] = None
    kind: Optional[str] = None
    offset: Optional[int] = None

    class Config:
        json_schema_extra = {
            "example": {
                "success": True,
                "identifier": "InChI=1S/H2O/h1H2",
                "notation": "InChI",
                "version": "1S",
                "components": ["H2O/h1H2"],
                "segments": [{
                    "component_index": 1,
                    "identifier": "H2O/h1H2",
                    "proportion": 1.0,
                    "depth": 0,
                    "color": {
                        "lightness": 0.71,
                        "chroma": 0.13,
                        "hue": 212.4,
                        "hex": "#5ab0d6",
                        "rgb": [90, 176, 214]
                    }
                }],
                "totals": {"1": 1.0},
                "processing_time": 0.002
            }
        }


class ColorSchemeModel(BaseModel):
    """Model for a four-color scheme."""
    primary: ColorModel
    first_accent: ColorModel
    second_accent: ColorModel
    complementary: ColorModel


class ColorsResponse(BaseModel):
    """Response model for color schemes."""
    schemes: Dict[str, ColorSchemeModel]
    min_separation: Optional[float] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    timestamp: str


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str
    kind: Optional[str] = None
    offset: Optional[int] = None
