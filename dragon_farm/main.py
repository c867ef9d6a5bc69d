from apscheduler.schedulers.asyncio import AsyncIOScheduler
import logging
from fastapi import FastAPI
from contextlib import asynccontextmanager

from dragon_farm.authentication.basic_authentication import BasicAuthentication
from dragon_farm.db import Session
from dragon_farm.routers import breeding, dragons
from dragon_farm.services.bootstrap import build_coordinator
from dragon_farm.services.farm_db import FarmDB
from dragon_farm.load_secrets import (
    breeding_commit_attempts,
    breeding_poll_seconds,
    log_level,
    rarity_recessive_weight,
)

basic_auth = BasicAuthentication()
scheduler = AsyncIOScheduler()
logging.basicConfig(level=log_level)
logging.getLogger("aiosqlite").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app):
    """Create tables, seed the trait catalog and starter dragons, and wire the breeding core.
    This function is called to start the server.
    """
    await basic_auth.create_table()
    coordinator = await build_coordinator(
        FarmDB(Session),
        recessive_weight=rarity_recessive_weight,
        commit_attempts=breeding_commit_attempts,
    )
    app.state.coordinator = coordinator

    # Drain queued breeding requests
    scheduler.add_job(
        coordinator.process_queued,
        "interval",
        seconds=breeding_poll_seconds,
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    logging.info(f"Start Server with {len(coordinator.registry)} trait(s)")
    try:
        yield
    finally:
        scheduler.shutdown()
        logging.info("Stop Server")


app = FastAPI(lifespan=lifespan)
app.include_router(dragons.dragon_router)
app.include_router(breeding.breeding_router)
