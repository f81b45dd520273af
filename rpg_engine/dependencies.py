from fastapi import Request

from rpg_engine.services.notification_service import EventBus


def get_event_bus(request: Request) -> EventBus:
    return request.app.state.event_bus
