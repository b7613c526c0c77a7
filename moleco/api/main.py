"""FastAPI application for the MoleCo swatch generator."""
from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from datetime import datetime
import time

import pandas as pd

from moleco.api.models import (
    SwatchRequest,
    BatchSwatchRequest,
    ColorsRequest,
    SwatchResponse,
    SegmentModel,
    ColorModel,
    ColorSchemeModel,
    ColorsResponse,
    HealthResponse,
    ErrorResponse
)
from moleco.config import settings
from moleco.processors.errors import IdentifierParseError
from moleco.processors.identifier_parser import IdentifierParser
from moleco.services.color_assigner import Color, minimum_separation
from moleco.services.swatch_service import Swatch, SwatchService
from moleco.utils.logging import logger

VERSION = "0.1.0"

app = FastAPI(
    title="MoleCo API",
    description="Deterministic color swatches for InChI and MInChI identifiers",
    version=VERSION
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

swatch_service = SwatchService()


def get_service(strict_version_check=None) -> SwatchService:
    """Service honoring a per-request version check override."""
    if strict_version_check is None or strict_version_check == settings.strict_version_check:
        return swatch_service
    return SwatchService(
        parser=IdentifierParser(strict_version_check),
        assigner=swatch_service.assigner
    )


def _color_model(color: Color) -> ColorModel:
    return ColorModel(**color.to_dict())


def _swatch_response(swatch: Swatch, processing_time: float) -> SwatchResponse:
    return SwatchResponse(
        success=True,
        identifier=swatch.identifier,
        notation=swatch.notation,
        version=swatch.version,
        components=list(swatch.components),
        segments=[
            SegmentModel(
                component_index=segment.component_index,
                identifier=swatch.components.identifier_for(segment.component_index),
                proportion=segment.proportion,
                depth=segment.depth,
                color=_color_model(segment.color)
            )
            for segment in swatch.segments
        ],
        totals=swatch.totals(),
        processing_time=processing_time
    )


@app.on_event("startup")
async def startup_event():
    """Log configuration on startup."""
    logger.info("Starting up MoleCo API...")
    logger.info(
        "Strict version check: %s, lightness %.2f-%.2f, chroma %.2f-%.2f",
        settings.strict_version_check,
        settings.lightness_min, settings.lightness_max,
        settings.chroma_min, settings.chroma_max
    )


@app.get("/", response_model=dict)
async def root():
    """Root endpoint."""
    return {
        "message": "MoleCo API",
        "version": VERSION,
        "docs": "/docs",
        "health": "/api/v1/health"
    }


@app.get("/api/v1/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        version=VERSION,
        timestamp=datetime.now().isoformat()
    )


@app.post(
    "/api/v1/swatch",
    response_model=SwatchResponse,
    responses={400: {"model": ErrorResponse}}
)
async def swatch(request: SwatchRequest):
    """
    Compute the swatch segments of one identifier.

    Args:
        request: Swatch request with identifier and options

    Returns:
        Ordered segments with proportions and colors
    """
    service = get_service(request.strict_version_check)
    start_time = time.time()
    result = service.generate(request.identifier)
    return _swatch_response(result, time.time() - start_time)


@app.post("/api/v1/batch-swatch")
async def batch_swatch(request: BatchSwatchRequest):
    """
    Compute swatches for multiple identifiers.

    Failures are reported per identifier instead of failing the batch.
    """
    service = get_service(request.strict_version_check)
    results = []
    for identifier in request.identifiers:
        start_time = time.time()
        outcome = service.try_generate(identifier)
        if outcome["success"]:
            results.append(_swatch_response(outcome["swatch"], time.time() - start_time))
        else:
            results.append(SwatchResponse(
                success=False,
                identifier=identifier,
                error=outcome["error"],
                kind=outcome["kind"],
                offset=outcome["offset"]
            ))
    return {"results": results}


@app.post("/api/v1/colors", responses={400: {"model": ErrorResponse}})
async def colors(request: ColorsRequest):
    """
    Color schemes for substance identifiers.

    Returns JSON by default, or CSV with one row per identifier.
    """
    schemes = swatch_service.schemes(request.identifiers)

    if request.format == "csv":
        rows = []
        for identifier, scheme in schemes.items():
            rows.append({
                "substance": identifier,
                "primary_hue": scheme.primary.hue,
                "primary_hex": scheme.primary.hex,
                "first_accent_hex": scheme.first_accent.hex,
                "second_accent_hex": scheme.second_accent.hex,
                "complementary_hex": scheme.complementary.hex,
                "lightness": scheme.primary.lightness,
                "chroma": scheme.primary.chroma,
            })
        return Response(content=pd.DataFrame(rows).to_csv(index=False), media_type="text/csv")

    separation = minimum_separation(scheme.primary for scheme in schemes.values())
    return ColorsResponse(
        schemes={
            identifier: ColorSchemeModel(
                primary=_color_model(scheme.primary),
                first_accent=_color_model(scheme.first_accent),
                second_accent=_color_model(scheme.second_accent),
                complementary=_color_model(scheme.complementary)
            )
            for identifier, scheme in schemes.items()
        },
        min_separation=separation if len(schemes) > 1 else None
    )


@app.exception_handler(IdentifierParseError)
async def parse_error_handler(request, exc):
    """Handle identifier parse errors."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": str(exc), "kind": exc.kind, "offset": exc.offset}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "moleco.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload
    )
