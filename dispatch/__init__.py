#Expose the high-level pipeline pieces:
#Typed events (one per user trigger)
#Session context (the state one customer owns)
#Dispatcher orchestrator (the "one call" entry point)

from .events import (
    ClearLocation,
    ClearRoute,
    ComputeRoute,
    LocateDevice,
    SelectPoint,
    SelectVehicle,
    SelectionMethod,
    SubmitRequest,
)
from .session import Notice, NoticeLevel, Outcome, SessionContext
from .dispatcher import Dispatcher, build_dispatcher #the main entry point for an intake session

__all__ = [
    "ClearLocation",
    "ClearRoute",
    "ComputeRoute",
    "LocateDevice",
    "SelectPoint",
    "SelectVehicle",
    "SelectionMethod",
    "SubmitRequest",
    "Notice",
    "NoticeLevel",
    "Outcome",
    "SessionContext",
    "Dispatcher",
    "build_dispatcher",
]
