import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rpg_engine.config import settings
from rpg_engine.routers import events, tools
from rpg_engine.services.notification_service import EventBus


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


configure_logging()

app = FastAPI(
    title="RPG State Engine",
    description="Combat, status effect, dice, random table, resource and timer state for tabletop RPG sessions",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.event_bus = EventBus()

app.include_router(tools.router)
app.include_router(events.router)


@app.get("/health")
async def health_check():
    return {"status": "ok"}
