from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, field_serializer
from pydantic.alias_generators import to_camel


class CustomModel(BaseModel):
    """
    Common base for every record and schema in the project.

    Python attributes are snake_case; the JSON document and the HTTP API use
    camelCase (``categoryId``, ``createdAt``). Both spellings are accepted on
    input.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @field_serializer('*', check_fields=False)
    def serialize_datetime(self, value, _info):
        """Render datetimes as UTC ISO-8601 strings with a trailing ``Z``."""
        if isinstance(value, datetime):
            if value.tzinfo is None:
                value = value.replace(tzinfo=timezone.utc)
            else:
                value = value.astimezone(timezone.utc)
            return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")
        return value


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
