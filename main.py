from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from dotenv import load_dotenv
from routers import portfolio
from services.config.config import get_config_status
from services.logging_setup import setup_logging
import dependencies
import os

load_dotenv()
setup_logging()

scheduler = BackgroundScheduler()


def scheduled_task():
    dependencies.cache.prune()


app = FastAPI(title="Wallet PnL Dashboard API")

# Add exception handler for validation errors
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Return detailed validation errors"""
    errors = []
    for error in exc.errors():
        field = " -> ".join(str(loc) for loc in error["loc"])
        errors.append({
            "field": field,
            "message": error["msg"],
            "type": error["type"]
        })
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "Validation error",
            "errors": errors,
            "body": exc.body if hasattr(exc, 'body') else None
        }
    )

# Include Routers
app.include_router(portfolio.router, prefix="/portfolio", tags=["Portfolio"])

@app.get("/")
def root():
    return {"message": "Wallet dashboard backend is running"}

@app.get("/health")
def health_check():
    """Health check endpoint for App Engine and load balancers"""
    return {"status": "healthy", "service": "wallet-dashboard"}

@app.get("/ready")
def readiness_check():
    """
    Readiness check endpoint - verifies the upstream configuration is present.
    Without it the portfolio endpoints only serve fallback data.
    """
    config_status = get_config_status()
    if not config_status.is_ready:
        return JSONResponse(
            status_code=503,
            content={"status": "not ready", "missing_keys": config_status.missing_keys}
        )
    return {"status": "ready", "missing_keys": []}

@app.on_event("startup")
async def startup_event():
    # Drop expired cache entries at a fixed interval
    scheduler.add_job(
        scheduled_task,
        trigger=IntervalTrigger(seconds=int(os.getenv("CACHE_PRUNE_PERIOD_SECONDS", "300"))),
        id="scheduled_task",
        replace_existing=True,
    )
    scheduler.start()

@app.on_event("shutdown")
async def shutdown_event():
    if scheduler.running:
        scheduler.shutdown(wait=False)
