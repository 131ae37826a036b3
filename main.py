# main.py
"""
FastAPI entry point for the recipe matcher.
Startup/readiness checks against Supabase, request-id middleware, uniform
`{"error": ...}` bodies, and draining of background match-record writes on
shutdown.
"""
import asyncio
import logging
import os
import uuid
from contextlib import asynccontextmanager
from typing import Dict, Optional

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from recipe_matcher.api.deps import get_match_recorder
from recipe_matcher.api.ingredients import router as ingredients_router
from recipe_matcher.api.matching import router as matching_router
from recipe_matcher.api.recipes import router as recipes_router
from recipe_matcher.config.settings import settings
from recipe_matcher.config.supabase import supabase_client
from recipe_matcher.errors import RecipeMatcherError

logger = logging.getLogger("uvicorn.error")

logging.getLogger("recipe_matcher").setLevel(settings.log_level)


async def _run_sync_in_executor(fn, *args, timeout: float = settings.health_check_timeout):
    """
    Run a blocking sync function in the default threadpool with a timeout.
    Returns the function's result or raises TimeoutError.
    """
    loop = asyncio.get_running_loop()
    return await asyncio.wait_for(loop.run_in_executor(None, fn, *args), timeout=timeout)


async def _supabase_healthy(where: str, timeout: float = settings.health_check_timeout) -> bool:
    try:
        return bool(await _run_sync_in_executor(supabase_client.health_check, timeout=timeout))
    except asyncio.TimeoutError:
        logger.warning("Supabase health_check timed out after %.1fs (%s)", timeout, where)
    except Exception as exc:
        logger.exception("Unexpected error calling supabase_client.health_check (%s): %s", where, exc)
    return False


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting recipe matcher...")

    app.state.supabase_healthy = await _supabase_healthy("startup")
    logger.info("Supabase health: %s %s", app.state.supabase_healthy, supabase_client.diagnostics())

    if not app.state.supabase_healthy and settings.fail_on_db_startup:
        logger.error("FAIL_ON_DB_STARTUP enabled and Supabase unhealthy. Aborting startup.")
        raise RuntimeError("Supabase unhealthy on startup")

    try:
        yield
    finally:
        logger.info("Shutting down recipe matcher...")
        try:
            await get_match_recorder().drain()
        except Exception:
            logger.exception("Error while draining match-record writes during shutdown")


app = FastAPI(
    title="Recipe Matcher",
    description="Ranks recipes by how well a pantry covers their ingredient lists",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # lock down per deployment
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_request_id_and_log(request: Request, call_next):
    request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
    request.state.request_id = request_id
    logger.info("→ Incoming request %s %s id=%s", request.method, request.url.path, request_id)
    try:
        response: Response = await call_next(request)
    except Exception as exc:
        logger.exception("Handler error for request id=%s: %s", request_id, exc)
        response = JSONResponse({"error": "Internal server error"}, status_code=500)
    logger.info("← Completed request id=%s status=%s", request_id, getattr(response, "status_code", None))
    response.headers["X-Request-Id"] = request_id
    return response


@app.exception_handler(RecipeMatcherError)
async def recipe_matcher_error_handler(request: Request, exc: RecipeMatcherError):
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        {"error": f"{field}: {message}" if field else message},
        status_code=400,
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s: %s", request.url.path, exc)
    return JSONResponse({"error": "Internal server error"}, status_code=500)


app.include_router(matching_router, prefix="/matching", tags=["matching"])
app.include_router(recipes_router, prefix="/recipes", tags=["recipes"])
app.include_router(ingredients_router, prefix="/ingredients", tags=["ingredients"])


@app.get("/")
async def root() -> Dict[str, str]:
    return {"message": "Recipe matcher is running!", "status": "healthy"}


@app.get("/health")
async def health_check():
    """
    Liveness: the process is up. Reports degraded (503) when Supabase is unreachable.
    """
    db_ok = await _supabase_healthy("/health")
    return JSONResponse(
        {
            "status": "healthy" if db_ok else "degraded",
            "service": "recipe-matcher",
            "database": "connected" if db_ok else "disconnected",
        },
        status_code=200 if db_ok else 503,
    )


@app.get("/ready")
async def readiness_check():
    """
    Readiness: uses the state cached at startup, else one bounded check.
    """
    supabase_state: Optional[bool] = getattr(app.state, "supabase_healthy", None)
    if supabase_state is None:
        supabase_state = await _supabase_healthy("/ready", timeout=2.0)

    if supabase_state:
        return JSONResponse({"ready": True, "database": "connected"}, status_code=200)
    return JSONResponse({"ready": False, "database": "disconnected"}, status_code=503)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", 5000)), reload=True)
