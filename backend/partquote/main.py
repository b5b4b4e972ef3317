import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from partquote.api import addresses, catalog, checkout, quotes
from partquote.db.session import init_db

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",") if o.strip()]

app = FastAPI(title="Part Quote Engine")

# CORS for the quoting frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(catalog.router, prefix="/catalog", tags=["catalog"])
app.include_router(quotes.router, prefix="/quotes", tags=["quotes"])
app.include_router(addresses.router, prefix="/user/addresses", tags=["addresses"])
app.include_router(checkout.router, prefix="/checkout", tags=["checkout"])


@app.on_event("startup")
def on_startup():
    init_db()
    logger.info("Part quote service started cors_origins=%s", CORS_ORIGINS)


@app.get("/")
async def root():
    return {"status": "ok", "service": "part-quote-engine"}
