from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config import VERSION
from exceptions import ImgoptError
from optimizers.factory import OptimizerFactory
from routers import health, optimize
from schemas import OptimizerOptions
from utils.logging import get_logger, setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: configure logging, build the optimizer registry, verify tools."""
    setup_logging()
    logger = get_logger("main")

    factory = OptimizerFactory(OptimizerOptions.from_settings())
    app.state.factory = factory

    tools = factory.check_optimizers()
    missing = [name for name, available in tools.items() if not available]
    if missing:
        logger.warning(
            f"Missing tools: {missing}",
            extra={"context": {"missing_tools": missing}},
        )

    yield

    logger.info("imgopt shutting down")


app = FastAPI(
    title="imgopt",
    description="Image optimizer driving external command-line tools",
    version=VERSION,
    lifespan=lifespan,
)


@app.exception_handler(ImgoptError)
async def imgopt_error_handler(request: Request, exc: ImgoptError):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.error_code,
            "message": exc.message,
            **exc.details,
        },
    )


app.include_router(health.router)
app.include_router(optimize.router)
