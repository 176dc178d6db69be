from enum import Enum

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from autoexit.api.routes.auto_exit import router as auto_exit_router
from autoexit.api.routes.balance import router as balance_router
from autoexit.api.routes.priority_fees import router as priority_fees_router
from autoexit.database import engine, SessionLocal
from autoexit.models import Base
from autoexit.services.api_config_service import seed_default_api_configs
from autoexit.utils.logging import setup_logging

logger = setup_logging()

app = FastAPI()


# tag enums
class Tags(Enum):
    positions = "Positions"
    balances = "Solana Balance"
    fees = "Priority Fees"


# Include routes
app.include_router(auto_exit_router, prefix="/auto-exit", tags=[Tags.positions])
app.include_router(balance_router, prefix="/solana-balance", tags=[Tags.balances])
app.include_router(priority_fees_router, prefix="/priority-fees", tags=[Tags.fees])

# Enable CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def startup_event():
    logger.info("Creating tables")
    Base.metadata.create_all(bind=engine)

    with SessionLocal() as db:
        seed_default_api_configs(db)
