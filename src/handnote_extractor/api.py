"""HTTP boundary for the multi-agent pipeline.

POST /api/multi-agent takes a multipart `image` upload and returns the
serialized PipelineResult. GET /health reports provider configuration.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI, File, UploadFile
from fastapi.responses import JSONResponse

from handnote_extractor import __version__
from handnote_extractor.engine.base import ImagePayload
from handnote_extractor.engine.errors import ImageInputError
from handnote_extractor.engine.registry import ModelRegistry
from handnote_extractor.pipeline.runner import run_multi_agent_pipeline
from handnote_extractor.preprocessing import detect_mime_type
from handnote_extractor.schemas.config import PipelineConfig

logger = logging.getLogger(__name__)


def create_app(config: PipelineConfig, registry: ModelRegistry | None = None) -> FastAPI:
    """Build the API around one registry shared by every request."""
    registry = registry or ModelRegistry(config)

    app = FastAPI(
        title="Handnote Extractor API",
        description="Dual-model extraction of SOAP notes and labs from handwritten medical documents",
        version=__version__,
    )
    app.state.config = config
    app.state.registry = registry

    @app.get("/health")
    async def health() -> dict:
        return {
            "status": "ok",
            "dry_run": config.dry_run,
            "providers": registry.configured_providers(),
        }

    @app.post("/api/multi-agent")
    async def multi_agent(image: UploadFile | None = File(None)) -> JSONResponse:
        data = await image.read() if image is not None else b""
        if not data:
            return JSONResponse({"success": False, "error": "No image provided"}, status_code=400)

        try:
            mime_type = image.content_type or detect_mime_type(data)
            if not mime_type.startswith("image/"):
                mime_type = detect_mime_type(data)
        except ImageInputError as exc:
            return JSONResponse({"success": False, "error": str(exc)}, status_code=400)

        logger.info("api: received %s (%s, %d bytes)", image.filename, mime_type, len(data))
        result = await run_multi_agent_pipeline(
            ImagePayload(data=data, mime_type=mime_type), registry, config
        )
        return JSONResponse(result.to_response(), status_code=200 if result.success else 500)

    return app
