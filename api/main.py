import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import seed
from auth import router as auth_router
from children import router as children_router
from core import db, errors, schema
from reindeer import router as reindeer_router

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO",
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


def cors_origin() -> str:
    return os.environ.get("CORS_ORIGIN", "http://localhost:8080").strip() or "http://localhost:8080"


@asynccontextmanager
async def lifespan(_: FastAPI):
    # One pool per process; tables and demo rows are ensured before serving.
    await db.init_pool()
    try:
        await schema.init_schema()
        await seed.run()
        logger.info("startup_complete")
        yield
    finally:
        await db.close_pool()


app = FastAPI(title="Bag o' Loot API", lifespan=lifespan)

# Only the front-end dev server may call the API from a browser.
app.add_middleware(
    CORSMiddleware,
    allow_origins=[cors_origin()],
    allow_methods=["*"],
    allow_headers=["*"],
)

errors.register_exception_handlers(app)

app.include_router(auth_router.router, tags=["token"])
app.include_router(children_router.router, tags=["child"])
app.include_router(reindeer_router.router, tags=["reindeer"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
