"""
Main FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from garage.config import Settings, get_settings
from garage.database import create_engine, init_db
from garage.exceptions import EntityValidationError, StaleEntityError, StorageUnavailableError
from garage.persistence import EntityManager, build_default_registry
from garage.routers import customers, invoices, repairs, users, vehicles
from garage.storage import KeyValueStore, MemoryKeyValueStore, SqlKeyValueStore, wait_until_ready


def create_app(settings: Optional[Settings] = None, store: Optional[KeyValueStore] = None) -> FastAPI:
    """
    Build the application.

    ``store`` replaces the backend selected by ``settings.storage_backend``;
    tests pass a MemoryKeyValueStore.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Lifespan events for the application.
        Handles startup and shutdown events.
        """
        logging.basicConfig(level=settings.log_level.upper())

        # Startup
        print("🚀 Starting Garage Management System...")
        engine = None
        backend = store
        if backend is None and settings.storage_backend == "sql":
            print(f"📊 Initializing database...")
            engine = create_engine(settings.database_url, echo=settings.debug)
            await init_db(engine)
            backend = SqlKeyValueStore(engine)
        elif backend is None:
            backend = MemoryKeyValueStore()

        await wait_until_ready(
            backend,
            timeout=settings.storage_ready_timeout,
            interval=settings.storage_ready_interval,
        )
        app.state.manager = EntityManager(
            backend,
            build_default_registry(),
            key_prefix=settings.entity_key_prefix,
            validate_on_update=settings.validate_on_update,
        )
        print("✅ Storage ready")
        print(f"🌐 API available at: {settings.api_v1_prefix}")
        print(f"📖 Interactive docs: http://localhost:8000/docs")

        yield

        # Shutdown
        print("👋 Shutting down Garage Management System...")
        app.state.manager = None
        if engine is not None:
            await engine.dispose()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="""
        ## 🔧 Garage Management System API

        Customers, vehicles, repairs, users and invoices stored as validated
        JSON entities in a key-value table.
        """,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(EntityValidationError)
    async def validation_error_handler(request: Request, exc: EntityValidationError):
        return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={"detail": exc.errors})

    @app.exception_handler(StaleEntityError)
    async def stale_entity_handler(request: Request, exc: StaleEntityError):
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})

    @app.exception_handler(StorageUnavailableError)
    async def storage_unavailable_handler(request: Request, exc: StorageUnavailableError):
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": str(exc)})

    # Include routers
    app.include_router(customers.router, prefix=settings.api_v1_prefix)
    app.include_router(vehicles.router, prefix=settings.api_v1_prefix)
    app.include_router(repairs.router, prefix=settings.api_v1_prefix)
    app.include_router(users.router, prefix=settings.api_v1_prefix)
    app.include_router(invoices.router, prefix=settings.api_v1_prefix)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "message": "Welcome to Garage Management System API",
            "version": settings.app_version,
            "docs": "/docs",
            "redoc": "/redoc",
        }

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        manager = getattr(request.app.state, "manager", None)
        ready = manager is not None and await manager.store.is_ready()
        return {
            "status": "healthy" if ready else "unavailable",
            "version": settings.app_version,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "garage.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
