"""
Term Deposit Engine: FastAPI application.

This is the entry point for the application.
All routers are registered here.
"""

from fastapi import FastAPI

from term_deposits.config import get_settings
from term_deposits.logging_config import setup_logging
from term_deposits.api.health import router as health_router
from term_deposits.api.simulator import router as simulator_router
from term_deposits.api.investments import router as investments_router
from term_deposits.api.maturities import router as maturities_router

settings = get_settings()
setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Term deposit lifecycle and maturity settlement",
)

# Register routers. The simulator's fixed /investments/* paths must
# come before /investments/{investment_id}.
app.include_router(health_router)
app.include_router(simulator_router)
app.include_router(investments_router)
app.include_router(maturities_router)
