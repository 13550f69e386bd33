from volunteer_hub.api.v1.schemas.events import (
    EventCreate,
    EventListOut,
    EventOut,
    EventUpdate,
    RegistrationOut,
    RegistrationStatus,
)
from volunteer_hub.api.v1.schemas.notifications import MarkedReadOut, NotificationOut, UnreadCountOut
from volunteer_hub.api.v1.schemas.participations import (
    AttendanceIn,
    EventParticipationOut,
    ParticipationOut,
    VolunteerParticipationOut,
)
from volunteer_hub.api.v1.schemas.stats import SweepOut, VolunteerStatsOut

__all__ = [
    "EventCreate",
    "EventUpdate",
    "EventOut",
    "EventListOut",
    "RegistrationOut",
    "RegistrationStatus",
    "ParticipationOut",
    "EventParticipationOut",
    "VolunteerParticipationOut",
    "AttendanceIn",
    "VolunteerStatsOut",
    "SweepOut",
    "NotificationOut",
    "UnreadCountOut",
    "MarkedReadOut",
]
