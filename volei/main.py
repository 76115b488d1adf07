from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from volei.api.v1.attendance.router import router as attendance_router
from volei.api.v1.auth.router import router as auth_router
from volei.api.v1.dashboard.router import router as dashboard_router
from volei.api.v1.finance.router import router as finance_router
from volei.api.v1.payments.router import router as payments_router
from volei.api.v1.students.router import router as students_router
from volei.core.cache import QueryCache
from volei.core.config import settings
from volei.core.logging_config import configure_logging


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="Vôlei de Quarta")

    # Dashboard reads are cached per app instance and invalidated by writes
    app.state.query_cache = QueryCache()

    # CORS: allow the frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(auth_router)
    app.include_router(students_router)
    app.include_router(payments_router)
    app.include_router(finance_router)
    app.include_router(attendance_router)
    app.include_router(dashboard_router)

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()
