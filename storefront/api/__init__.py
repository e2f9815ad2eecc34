# storefront/api/__init__.py
from fastapi import FastAPI
from storefront.api.routers import health, users, products, carts, orders


def create_api(title: str = "Storefront", version: str = "1.0.0", lifespan=None) -> FastAPI:
    app = FastAPI(title=title, version=version, lifespan=lifespan)

    # Include routers
    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(products.router)
    app.include_router(carts.router)
    app.include_router(orders.router)

    return app
