"""
FastAPI app for the annotation relay.

Run with `uvicorn api.main:create_app --factory`.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.auth import gate_dependencies
from api.config import RelayConfig, Settings, load_config
from api.schemas import GraphResponse, HealthResponse
from pipeline.features import DEFAULT_FEATURES, InvalidFeatureError
from pipeline.graph import build_graph
from pipeline.state import AnnotationState

logging.basicConfig(level=logging.INFO)
log = logging.getLogger(__name__)


async def read_image_field(request: Request) -> bytes:
    """
    Return the full content of the multipart file field `image`.

    Raises HTTPException(400) with the underlying error text otherwise.
    """
    try:
        form = await request.form()
    except StarletteHTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    try:
        upload = form.get("image")
        if not isinstance(upload, UploadFile):
            raise HTTPException(status_code=400, detail="http: no such file")
        try:
            return await upload.read()
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
    finally:
        await form.close()


def create_app(config: Optional[RelayConfig] = None) -> FastAPI:
    """
    Build the relay app around an explicitly supplied `RelayConfig`.

    With no config, settings are read from the environment and the
    production vision client is created from service-account credentials.
    """
    if config is None:
        settings = Settings()
        logging.getLogger().setLevel(settings.log_level)
        config = load_config(settings)

    graph = build_graph(config.client)

    app = FastAPI(
        title="Hana Info",
        version="1.0.0",
        description="Relays uploaded images to Cloud Vision label detection.",
        dependencies=gate_dependencies(config.basic_auth),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def plain_text_http_error(request: Request, exc: StarletteHTTPException):
        return PlainTextResponse(
            str(exc.detail),
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(InvalidFeatureError)
    async def invalid_feature(request: Request, exc: InvalidFeatureError):
        return PlainTextResponse(str(exc), status_code=400)

    @app.post("/hana/info")
    async def hana_info(request: Request):
        """
        Annotate the uploaded `image` and return the first response as JSON.
        """
        image = await read_image_field(request)
        log.info("Received image (%d bytes)", len(image))

        state: AnnotationState = {
            "image": image,
            "feature_spec": DEFAULT_FEATURES,
            "error": None,
        }

        # The vision call blocks; keep it off the event loop
        result = await run_in_threadpool(graph.invoke, state)

        if result.get("error"):
            raise HTTPException(status_code=400, detail=result["error"])

        return Response(content=result["body"], media_type="application/json")

    @app.get("/graph/mermaid", response_model=GraphResponse)
    def graph_mermaid():
        """
        Return Mermaid source for visualizing the annotation pipeline.
        """
        return GraphResponse(mermaid=graph.get_graph().draw_mermaid())

    @app.get("/health", response_model=HealthResponse)
    def health():
        """
        Basic health check.
        """
        return HealthResponse()

    return app
