"""HTTP entry point for the spam classifier.

``POST /api/spam`` accepts ``{"text": ...}`` and answers with the spam
probability and verdict.  The classifier lives on ``app.state`` and is
resolved through :func:`get_classifier`, so tests (or an embedding
application) can hand :func:`create_app` their own instance.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from lib.config.spam_api_loader import SpamApiConfig, load_spam_api_config
from lib.contracts.spam import HealthResponse, SpamRequest, SpamResponse
from lib.telemetry.logger import configure_logging, get_logger

from apps.spam_api import SpamClassifier


logger = get_logger(__name__)

ERROR_MESSAGES = {
    400: "Bad request",
    404: "Not found",
    405: "Method not allowed",
    500: "Internal server error",
}


def get_classifier(request: Request) -> SpamClassifier:
    return request.app.state.classifier


def _error(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 405 or not isinstance(exc.detail, str):
        message = ERROR_MESSAGES.get(exc.status_code, "Error")
    else:
        message = exc.detail
    return _error(exc.status_code, message, getattr(exc, "headers", None))


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error(400, "Invalid request body")


async def _server_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
    return _error(500, ERROR_MESSAGES[500])


def create_app(
    classifier: Optional[SpamClassifier] = None,
    config: Optional[SpamApiConfig] = None,
) -> FastAPI:
    """Build the FastAPI application.

    Parameters
    ----------
    classifier:
        Classifier to serve.  Built from ``config`` when omitted.
    config:
        Service configuration.  Loaded from ``spam_api.yaml`` and the
        environment when omitted.
    """

    cfg = config or load_spam_api_config()
    configure_logging(cfg.log_level)
    classifier = classifier or SpamClassifier.from_config(cfg)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if cfg.preload:
            try:
                app.state.classifier.warm_up()
            except Exception:
                logger.exception("Model preload failed; loading on first request instead")
        yield

    app = FastAPI(title="Spam classifier", lifespan=lifespan)
    app.state.classifier = classifier
    app.state.config = cfg

    if cfg.cors_enabled:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["GET", "POST", "PUT", "DELETE"],
            allow_headers=["Content-Type"],
        )

    @app.middleware("http")
    async def guard(request: Request, call_next):
        """Turn stray errors into JSON 500s and tag every response for CORS.

        ``CORSMiddleware`` only answers requests that carry an ``Origin``
        header; the allow-origin header is sent on all responses here.
        """

        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Error occurred while handling %s %s", request.method, request.url.path)
            response = _error(500, ERROR_MESSAGES[500])
        if cfg.cors_enabled:
            response.headers.setdefault("Access-Control-Allow-Origin", "*")
        return response

    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(Exception, _server_error)

    @app.post("/api/spam", response_model=SpamResponse)
    def classify(req: SpamRequest, clf: SpamClassifier = Depends(get_classifier)):
        """Return the spam probability and verdict for ``req.text``."""

        if not req.text:
            raise HTTPException(status_code=400, detail="Text is required")
        try:
            verdict = clf.classify(req.text)
        except Exception:
            logger.exception("Error occurred while classifying text")
            return _error(500, ERROR_MESSAGES[500])
        return SpamResponse(spamProbability=verdict.spam_probability, isSpam=verdict.is_spam)

    @app.get("/healthz", response_model=HealthResponse)
    def healthz(clf: SpamClassifier = Depends(get_classifier)):
        """Liveness probe; reports the model state without loading it."""

        return HealthResponse(model=clf.model.state)

    return app


app = create_app()


def run() -> None:
    cfg: SpamApiConfig = app.state.config
    uvicorn.run(app, host=cfg.host, port=cfg.port)


if __name__ == "__main__":
    run()
