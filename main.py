from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.database import init_db
from core.errors import register_exception_handlers
from core.logging_config import configure_logging
from core.settings import get_settings
from modules.bom.router import router as bom_router
from modules.costing.router import router as costing_router
from modules.materials.router import router as materials_router
from modules.products.router import router as products_router
from modules.reports.router import router as reports_router
from modules.variations.router import router as variations_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    init_db()
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title=settings.app_name, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(materials_router)
    app.include_router(products_router)
    app.include_router(bom_router)
    app.include_router(variations_router)
    app.include_router(costing_router)
    app.include_router(reports_router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="127.0.0.1", port=8000, log_level="info")
