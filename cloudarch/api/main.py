from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cloudarch import config
from cloudarch.api.routes import router
from cloudarch.utils.logging import setup_logging


def create_app() -> FastAPI:
    setup_logging(config.LOG_LEVEL)

    app = FastAPI(
        title="Cloud Architecture Generator",
        version="0.1.0",
    )

    # Middleware before routes
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)
    return app


app = create_app()
