import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from beds import router as beds_router
from companions import router as companions_router
from core import config, db
from core.errors import GardenError
from crops import router as crops_router
from locations import router as locations_router
from store.postgres import register_postgres_stores
from store.registry import registry
from users import router as users_router

logging.basicConfig(
    level=config.log_level(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger("garden.api")


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Initialize the DB pool once per process.
    await db.init_pool()
    register_postgres_stores(registry)
    try:
        yield
    finally:
        await db.close_pool()


app = FastAPI(lifespan=lifespan)

# Allow local frontend dev server to call this API from the browser.
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(GardenError)
async def garden_error_handler(request: Request, exc: GardenError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_failed path=%s status=%s message=%s", request.url.path, exc.status_code, exc.message)
    else:
        logger.info("request_rejected path=%s status=%s message=%s", request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


app.include_router(crops_router.router, tags=["crops"])
app.include_router(companions_router.router, tags=["companionships"])
app.include_router(users_router.router, tags=["users"])
app.include_router(locations_router.router, tags=["locations"])
app.include_router(beds_router.router, tags=["beds"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "garden planner api"}
