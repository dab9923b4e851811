"""Domain enumerations and state-transition rules."""

import enum


class VehicleStatus(str, enum.Enum):
    UNAVAILABLE = "UNAVAILABLE"
    WAITING = "WAITING"
    ON_TRIP = "ON_TRIP"


class TripStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"


# State machine: maps current status -> set of valid next statuses
TRIP_TRANSITIONS: dict[TripStatus, set[TripStatus]] = {
    TripStatus.ACTIVE: {TripStatus.COMPLETED},
    TripStatus.COMPLETED: set(),
}


class AfterTrip(str, enum.Enum):
    """What the dispatcher does with a vehicle once its trip is completed."""

    REQUEUE = "REQUEUE"  # stay on duty, back to the end of the queue
    OFF_DUTY = "OFF_DUTY"
