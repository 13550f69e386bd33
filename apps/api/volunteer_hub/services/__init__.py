from volunteer_hub.services.events_service import (
    cancel_event,
    create_event,
    delete_event,
    list_events,
    update_event,
)
from volunteer_hub.services.registration_service import (
    cancel,
    confirm,
    mark_attended,
    mark_no_show,
    register,
)
from volunteer_hub.services.stats_service import get_stats
from volunteer_hub.services.sweeper import run_sweep

__all__ = [
    "create_event",
    "update_event",
    "cancel_event",
    "delete_event",
    "list_events",
    "register",
    "cancel",
    "confirm",
    "mark_attended",
    "mark_no_show",
    "run_sweep",
    "get_stats",
]
