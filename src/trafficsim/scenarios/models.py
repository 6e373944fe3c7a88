"""
Scenario Data Models

Pydantic schemas for traffic scenarios and the request bodies that create
and update them. Field names are snake_case in Python and camelCase on the
wire and on disk (``startLat``, ``vehicleCount``...).
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from ..errors import ValidationError


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class Vehicle(CamelModel):
    """A simulated vehicle travelling between two points"""
    id: str = Field(..., description="Vehicle identifier")
    start_lat: float = Field(..., ge=-90, le=90, description="Start latitude (degrees)")
    start_lng: float = Field(..., ge=-180, le=180, description="Start longitude (degrees)")
    end_lat: float = Field(..., ge=-90, le=90, description="End latitude (degrees)")
    end_lng: float = Field(..., ge=-180, le=180, description="End longitude (degrees)")
    speed: float = Field(..., ge=0, description="Speed (km/h)")
    headway: float = Field(..., ge=0, description="Headway (seconds)")


class SignalCycle(CamelModel):
    """Phase durations of a traffic signal"""
    red: float = Field(..., gt=0, description="Red phase (seconds)")
    yellow: float = Field(..., gt=0, description="Yellow phase (seconds)")
    green: float = Field(..., gt=0, description="Green phase (seconds)")


class Signal(CamelModel):
    """A traffic signal at a fixed location"""
    id: str = Field(..., description="Signal identifier")
    lat: float = Field(..., ge=-90, le=90, description="Latitude (degrees)")
    lng: float = Field(..., ge=-180, le=180, description="Longitude (degrees)")
    cycle: SignalCycle


class Scenario(CamelModel):
    """
    A named, persisted traffic configuration.

    This is the stored-record shape: vehicles and signals are kept as the
    raw camelCase objects found on disk and no range limits apply, so records
    written by older clients load unchanged. Range checks live on the
    request bodies (ScenarioCreate, ScenarioUpdate).
    """
    model_config = ConfigDict(extra='allow')

    id: str = ""
    name: str = ""
    description: Optional[str] = ""
    vehicles: List[Any] = Field(default_factory=list)
    signals: List[Any] = Field(default_factory=list)
    created: Optional[str] = None
    modified: Optional[str] = None


class ScenarioCreate(CamelModel):
    """Body of POST /scenarios"""
    name: Optional[str] = None
    description: Optional[str] = None
    vehicles: Optional[List[Vehicle]] = None
    signals: Optional[List[Signal]] = None


class ScenarioUpdate(CamelModel):
    """Body of PUT /scenarios/<id>; every field is optional"""
    name: Optional[str] = None
    description: Optional[str] = None
    vehicles: Optional[List[Vehicle]] = None
    signals: Optional[List[Signal]] = None

    def provided_fields(self) -> dict:
        """Fields the client actually sent with a non-null value"""
        fields = self.model_dump(exclude_unset=True)
        return {
            key: getattr(self, key)
            for key, value in fields.items()
            if value is not None
        }


def timestamp() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision"""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def describe_validation_error(error: PydanticValidationError) -> str:
    """Short one-line description of the first failing field"""
    first = error.errors()[0]
    location = '.'.join(str(part) for part in first.get('loc', ())) or 'body'
    return f"Invalid field '{location}': {first.get('msg', 'invalid value')}"


def parse_model(model_cls, data):
    """Validate ``data`` into ``model_cls``, raising the service ValidationError"""
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        return model_cls.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(describe_validation_error(e)) from e


def as_records(items) -> List[Dict[str, Any]]:
    """Vehicles/signals as the camelCase dicts that are persisted"""
    return [item.to_dict() if isinstance(item, CamelModel) else item for item in items]
