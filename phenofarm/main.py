# phenofarm/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from phenofarm.config import settings
from phenofarm.database import init_db

from phenofarm.routes.auth import router as auth_router
from phenofarm.routes.products import router as products_router
from phenofarm.routes.strains import router as strains_router
from phenofarm.routes.batches import router as batches_router
from phenofarm.routes.catalog import router as catalog_router
from phenofarm.routes.cart import router as cart_router
from phenofarm.routes.checkout import router as checkout_router
from phenofarm.routes.orders import router as orders_router
from phenofarm.routes.favorites import router as favorites_router
from phenofarm.routes.price_alerts import router as price_alerts_router
from phenofarm.routes.preferences import router as preferences_router
from phenofarm.routes.settings import router as settings_router
from phenofarm.routes.stripe import router as stripe_router
from phenofarm.routes.logs import router as logs_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

init_db()

app = FastAPI(title="PhenoFarm API", version="1.0.0")

# CORS Configuration
origins = ["http://localhost:3000", "http://127.0.0.1:3000"]
if settings.FRONTEND_URL and settings.FRONTEND_URL not in origins:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Router registration
app.include_router(auth_router)
app.include_router(products_router)
app.include_router(strains_router)
app.include_router(batches_router)
app.include_router(catalog_router)
app.include_router(cart_router)
app.include_router(checkout_router)
app.include_router(orders_router)
app.include_router(favorites_router)
app.include_router(price_alerts_router)
app.include_router(preferences_router)
app.include_router(settings_router)
app.include_router(stripe_router)
app.include_router(logs_router)


@app.get("/")
def read_root():
    return {"message": "PhenoFarm API is running"}
