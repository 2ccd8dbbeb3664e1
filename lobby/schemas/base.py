"""Shared Pydantic base models and serializers."""
from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def datetime_to_utc_z(value: datetime) -> str:
    """
    Serialize datetime to RFC3339 with trailing 'Z'.

    Policy:
    - Naive datetime is treated as UTC.
    - Aware datetime is converted to UTC.
    """
    if value.tzinfo is None:
        utc_value = value.replace(tzinfo=timezone.utc)
    else:
        utc_value = value.astimezone(timezone.utc)

    iso_value = utc_value.isoformat()
    if iso_value.endswith("+00:00"):
        return iso_value[:-6] + "Z"
    return iso_value


def epoch_to_datetime(value: float) -> datetime:
    """Convert an epoch timestamp to an aware UTC datetime."""
    return datetime.fromtimestamp(value, tz=timezone.utc)


class CamelModel(BaseModel):
    """Base model exposed to the browser client.

    Fields are snake_case in Python and camelCase on the wire; datetimes
    serialize as UTC with a 'Z' suffix.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_encoders={datetime: datetime_to_utc_z},
    )
