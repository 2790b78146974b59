from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.api import routes_booking, routes_health, routes_trips
from storefront.core.config import Settings, settings
from storefront.core.logging import configure_logging
from storefront.services.booking_workflow import BookingIdGenerator
from storefront.storage.catalog import load_catalog
from storefront.storage.repository import InMemoryRepository


def create_app(app_settings: Settings = settings) -> FastAPI:
    configure_logging(app_settings.log_level)
    app = FastAPI(title=app_settings.app_name, version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    catalog = load_catalog(
        url=app_settings.catalog_url,
        path=app_settings.catalog_path,
        timeout=app_settings.catalog_timeout,
    )
    repository = InMemoryRepository(
        catalog=catalog, max_sessions=app_settings.max_booking_sessions
    )

    app.include_router(routes_health.router, tags=["health"])
    app.include_router(routes_trips.router, prefix="/trips", tags=["trips"])
    app.include_router(routes_booking.router, prefix="/bookings", tags=["booking"])

    # Shared by every request through the dependencies in storefront.api
    app.state.repository = repository
    app.state.booking_ids = BookingIdGenerator(prefix=app_settings.booking_id_prefix)
    app.state.settings = app_settings
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
