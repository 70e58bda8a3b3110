from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.bulk.router import router as bulk_router
from app.core.logging import setup_logging


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(title="Bulk Operations Service")

    # CORS: allow frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(bulk_router)

    return app


app = create_app()
