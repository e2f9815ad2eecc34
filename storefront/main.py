# storefront/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
import uvicorn

from storefront.api import create_api
from storefront.data.database import init_db
from storefront.data.seed import seed
from storefront.utils.settings import SEED_PRODUCT_COUNT
from storefront.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info("Initializing database")
    init_db()
    if SEED_PRODUCT_COUNT:
        seed(SEED_PRODUCT_COUNT)
    yield


def create_app() -> FastAPI:
    return create_api(title="Storefront Services", version="1.0.0", lifespan=lifespan)


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
