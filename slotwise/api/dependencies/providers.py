# slotwise/api/dependencies/providers.py
from datetime import datetime
from typing import Callable

from slotwise.core.timeutils import utc_now
from slotwise.services.calendar_client import CalendarClientFactory, build_calendar_client

Clock = Callable[[], datetime]


def get_clock() -> Clock:
    """
    Source of "now" for request handlers. Tests override it with a frozen
    clock.
    """
    return utc_now


def get_calendar_client_factory() -> CalendarClientFactory | None:
    """
    Factory used to talk to a host's connected calendar. Overriding it with
    None disables the external calendar entirely.
    """
    return build_calendar_client
