"""GPS value object and accuracy grading for unit entries."""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.utils import timezone

from .choices import GPSQuality
from .conf import gps_thresholds
from .exceptions import ValidationError


# Precision of the model columns the values end up in.
COORDINATE_PLACES = Decimal("0.000001")
ACCURACY_PLACES = Decimal("0.01")


def _to_decimal(value, name: str, places: Decimal) -> Decimal:
    try:
        number = Decimal(str(value))
        if number.is_finite():
            return number.quantize(places, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError):
        pass
    raise ValidationError(f"{name} must be a number", field=name)


@dataclass(frozen=True)
class Location:
    """Immutable GPS fix captured on the device.

    Accuracy is the reported horizontal error radius in meters; it may be
    unknown (None).
    """

    latitude: Decimal
    longitude: Decimal
    accuracy: Decimal | None = None
    captured_at: datetime = field(default_factory=timezone.now)

    def __post_init__(self) -> None:
        # Use object.__setattr__ since dataclass is frozen
        if self.latitude is None or self.longitude is None:
            raise ValidationError("Location requires latitude and longitude", field="location")
        latitude = _to_decimal(self.latitude, "latitude", COORDINATE_PLACES)
        longitude = _to_decimal(self.longitude, "longitude", COORDINATE_PLACES)
        if not Decimal("-90") <= latitude <= Decimal("90"):
            raise ValidationError("latitude out of range", field="latitude")
        if not Decimal("-180") <= longitude <= Decimal("180"):
            raise ValidationError("longitude out of range", field="longitude")
        object.__setattr__(self, "latitude", latitude)
        object.__setattr__(self, "longitude", longitude)
        if self.accuracy is not None:
            accuracy = _to_decimal(self.accuracy, "accuracy", ACCURACY_PLACES)
            if accuracy < 0:
                raise ValidationError("accuracy cannot be negative", field="accuracy")
            object.__setattr__(self, "accuracy", accuracy)
        if self.captured_at is None:
            object.__setattr__(self, "captured_at", timezone.now())

    @classmethod
    def from_dict(cls, data: dict) -> "Location":
        """Build from a JSON payload ({latitude, longitude, accuracy, capturedAt})."""
        if not isinstance(data, dict):
            raise ValidationError("Location is required", field="location")
        captured_at = data.get("captured_at") or data.get("capturedAt")
        if isinstance(captured_at, str):
            from django.utils.dateparse import parse_datetime

            captured_at = parse_datetime(captured_at)
        return cls(
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
            accuracy=data.get("accuracy"),
            captured_at=captured_at or timezone.now(),
        )

    @property
    def quality(self) -> str:
        return classify_accuracy(self.accuracy)


def classify_accuracy(accuracy) -> str:
    """
    Grade a GPS accuracy radius.

    high: accuracy < 10m, medium: 10m <= accuracy <= 50m, low: > 50m,
    none: accuracy unknown. Cut-offs come from WORKORDERS_GPS_* settings.
    """
    if accuracy is None:
        return GPSQuality.NONE
    accuracy = Decimal(str(accuracy))
    high, low = gps_thresholds()
    if accuracy < high:
        return GPSQuality.HIGH
    if accuracy <= low:
        return GPSQuality.MEDIUM
    return GPSQuality.LOW
