"""TripEntry class for trip log records."""

import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

from .errors import ErrorKind, ValidationError
from .guard import in_range, not_blank, to_cents

MIN_KILOMETERS = Decimal("0.1")
MAX_KILOMETERS = Decimal("1000000")


class TripEntry:
    """A trip taken by a user with a vehicle. References are stored as ids."""

    def __init__(
        self,
        trip_id: Optional[uuid.UUID],
        trip_date: date,
        user_id: uuid.UUID,
        vehicle_id: uuid.UUID,
        reason: str,
        kilometers: Decimal,
    ):
        self.id = trip_id if trip_id and trip_id.int else uuid.uuid4()
        self.date = trip_date
        if user_id is None or not user_id.int:
            raise ValidationError("User id must not be empty.", ErrorKind.BLANK)
        if vehicle_id is None or not vehicle_id.int:
            raise ValidationError("Vehicle id must not be empty.", ErrorKind.BLANK)
        self.user_id = user_id
        self.vehicle_id = vehicle_id
        self.reason = not_blank(reason, "Reason")
        self.kilometers = to_cents(
            in_range(Decimal(kilometers), MIN_KILOMETERS, MAX_KILOMETERS, "Kilometers")
        )
