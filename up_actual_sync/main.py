"""FastAPI application for triggering the Up → Actual sync over HTTP.

This module builds the FastAPI application, applies the configured log level and exposes the Scalar API reference
endpoint for interactive OpenAPI documentation. It also includes the main entrypoint for running the app with
Uvicorn.
"""

from fastapi import FastAPI
from fastapi.responses import HTMLResponse
from scalar_fastapi import get_scalar_api_reference

from up_actual_sync import __version__
from up_actual_sync.api.routes import router
from up_actual_sync.core.settings import Settings, load_config
from up_actual_sync.core.utils import setup_logging


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application around settings loaded once by the caller.

    Without settings the app loads them from ``.env`` on the first request that needs them.
    """
    setup_logging(settings.log_level if settings is not None else "info")
    app = FastAPI(
        docs_url="/docs",
        redoc_url="/redoc",
        title="Up → Actual Sync API",
        description="""
    Trigger a sync of settled Up Bank transactions into Actual Budget.

    **Endpoints:**
    - `POST /sync`: Run one sync attempt for the configured rolling window.
    - `GET /health`: Health check endpoint.
    - `GET /scalar`: Interactive Scalar OpenAPI documentation.
    """,
        version=__version__,
    )
    app.state.settings = settings
    app.include_router(router)

    @app.get("/scalar", include_in_schema=False)
    async def scalar_docs() -> HTMLResponse:
        """Return Scalar API reference."""
        return get_scalar_api_reference(openapi_url=app.openapi_url, title=app.title)

    return app


if __name__ == "__main__":
    import uvicorn

    settings = load_config()
    uvicorn.run(create_app(settings), host=settings.server_host, port=settings.server_port)
