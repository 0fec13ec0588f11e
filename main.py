from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from framework.config import settings
from framework.database.manager import DatabaseManager
from framework.middleware.logging_md import LoggingMiddleware
from framework.logging.logger import LogConfig, get_logger
from framework.exceptions.handler import BusinessException, global_exception_handler
from apps.users.api.router import router as users_router
from apps.external.api.router import router as external_router

# Initialize logging configuration
LogConfig.setup_logging()
logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    manager = DatabaseManager.get_instance()
    await manager.sql.connect()
    # No migration tool: create any missing tables at startup
    await manager.sql.create_all()
    logger.info(f"{settings.APP_NAME} started | Database: {settings.DATABASE_URL}")
    yield
    await DatabaseManager.shutdown()
    logger.info(f"{settings.APP_NAME} stopped")


app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Register global exception handlers
app.add_exception_handler(BusinessException, global_exception_handler)
app.add_exception_handler(RequestValidationError, global_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.add_middleware(LoggingMiddleware)

# Mount routers (prefix from config)
app.include_router(
    users_router,
    prefix=settings.API_V1_USERS_PREFIX,
    tags=["Users"]
)

app.include_router(
    external_router,
    prefix=settings.API_V1_EXTERNAL_PREFIX,
    tags=["External API"]
)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
