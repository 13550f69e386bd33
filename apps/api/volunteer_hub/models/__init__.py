from volunteer_hub.models.base import Base
from volunteer_hub.models.event import Event
from volunteer_hub.models.notification import Notification
from volunteer_hub.models.organizer import Organizer
from volunteer_hub.models.participation import Participation
from volunteer_hub.models.volunteer import Volunteer

__all__ = ["Base", "Event", "Participation", "Volunteer", "Organizer", "Notification"]
