# salon/main.py

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

from salon.data import LOG_LEVEL
from salon.db import create_db_and_tables
from salon.routers import appointments_routes, auth_routes, services_routes, staff_routes, users_routes

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logging.getLogger("passlib").setLevel(logging.WARNING)
logger = logging.getLogger("salon")


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    logger.info("database ready")
    yield


app = FastAPI(title="Salon Admin API", lifespan=lifespan)

app.include_router(auth_routes.router)
app.include_router(users_routes.router)
app.include_router(services_routes.router)
app.include_router(staff_routes.router)
app.include_router(appointments_routes.router)


@app.get("/health")
def health_check():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
