"""
Entity Validation

Pure functions returning a list of field errors ({"field", "message"}).
An empty list means the data is valid. Callers pass the merged view of the
entity (stored values overlaid with the requested changes) so that
cross-field rules always see both sides.
"""

from datetime import datetime
from numbers import Number
from typing import Any, List, Mapping

from src.domain.entities import IncidentType, Priority
from src.domain.entities.notification import MAX_MESSAGE_LENGTH, MAX_TITLE_LENGTH
from src.domain.errors import FieldError, field_error

EVENT_NAME_MIN = 3
EVENT_NAME_MAX = 100
EVENT_DESCRIPTION_MAX = 1000
EVENT_VENUE_MAX = 200
INCIDENT_TITLE_MAX = 200
INCIDENT_DESCRIPTION_MAX = 5000
INCIDENT_LOCATION_MAX = 200


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


def _too_long(value: Any, limit: int) -> bool:
    return isinstance(value, str) and len(value) > limit


def _not_null(data: Mapping[str, Any], *keys: str) -> List[FieldError]:
    """Keys that are present but explicitly null"""
    return [
        field_error(key, f"{key.capitalize()} cannot be null")
        for key in keys
        if key in data and data[key] is None
    ]


def validate_location(location: Any) -> List[FieldError]:
    errors: List[FieldError] = []
    if location is None:
        return errors
    if not isinstance(location, Mapping):
        return [field_error("location", "Location must be an object")]

    what3words = location.get("what3words")
    if what3words is not None and not isinstance(what3words, str):
        errors.append(field_error("location.what3words", "what3words must be a string"))

    coordinates = location.get("coordinates")
    if coordinates is not None:
        if (
            not isinstance(coordinates, (list, tuple))
            or len(coordinates) != 2
            or not all(
                isinstance(c, Number) and not isinstance(c, bool) for c in coordinates
            )
        ):
            errors.append(
                field_error(
                    "location.coordinates",
                    "Coordinates must be an array of two numbers [longitude, latitude]",
                )
            )
        else:
            longitude, latitude = coordinates
            if not -180 <= longitude <= 180 or not -90 <= latitude <= 90:
                errors.append(
                    field_error("location.coordinates", "Coordinates are out of range")
                )
    return errors


def validate_event(data: Mapping[str, Any]) -> List[FieldError]:
    errors: List[FieldError] = []

    name = data.get("name")
    if not isinstance(name, str) or len(name.strip()) < EVENT_NAME_MIN:
        errors.append(
            field_error("name", f"Name must be at least {EVENT_NAME_MIN} characters long")
        )
    elif len(name) > EVENT_NAME_MAX:
        errors.append(
            field_error("name", f"Name must be at most {EVENT_NAME_MAX} characters long")
        )

    if _too_long(data.get("description"), EVENT_DESCRIPTION_MAX):
        errors.append(
            field_error(
                "description",
                f"Description must be at most {EVENT_DESCRIPTION_MAX} characters long",
            )
        )

    if _too_long(data.get("venue"), EVENT_VENUE_MAX):
        errors.append(
            field_error("venue", f"Venue must be at most {EVENT_VENUE_MAX} characters long")
        )

    start_date = data.get("start_date")
    end_date = data.get("end_date")
    if isinstance(start_date, datetime) and isinstance(end_date, datetime):
        if end_date < start_date:
            errors.append(field_error("end_date", "End date must be after start date"))

    errors.extend(validate_location(data.get("location")))
    errors.extend(_not_null(data, "type", "priority"))
    return errors


def validate_incident(data: Mapping[str, Any]) -> List[FieldError]:
    errors: List[FieldError] = []
    errors.extend(_not_null(data, "type", "priority"))


    title = data.get("title")
    if not isinstance(title, str) or not title.strip():
        errors.append(field_error("title", "Title is required"))
    elif len(title) > INCIDENT_TITLE_MAX:
        errors.append(
            field_error("title", f"Title must be at most {INCIDENT_TITLE_MAX} characters long")
        )

    if _too_long(data.get("description"), INCIDENT_DESCRIPTION_MAX):
        errors.append(
            field_error(
                "description",
                f"Description must be at most {INCIDENT_DESCRIPTION_MAX} characters long",
            )
        )

    if _too_long(data.get("location"), INCIDENT_LOCATION_MAX):
        errors.append(
            field_error(
                "location",
                f"Location must be at most {INCIDENT_LOCATION_MAX} characters long",
            )
        )

    if _enum_value(data.get("type")) == IncidentType.EMERGENCY.value and _enum_value(
        data.get("priority")
    ) != Priority.CRITICAL.value:
        errors.append(
            field_error("priority", "Emergency incidents must have CRITICAL priority")
        )
    return errors


def validate_notification(data: Mapping[str, Any]) -> List[FieldError]:
    errors: List[FieldError] = []

    if not data.get("type"):
        errors.append(field_error("type", "Type is required"))

    title = data.get("title")
    if not isinstance(title, str) or not title.strip():
        errors.append(field_error("title", "Title is required"))
    elif len(title) > MAX_TITLE_LENGTH:
        errors.append(
            field_error("title", f"Title must be at most {MAX_TITLE_LENGTH} characters long")
        )

    message = data.get("message")
    if not isinstance(message, str) or not message.strip():
        errors.append(field_error("message", "Message is required"))
    elif len(message) > MAX_MESSAGE_LENGTH:
        errors.append(
            field_error(
                "message", f"Message must be at most {MAX_MESSAGE_LENGTH} characters long"
            )
        )
    return errors
