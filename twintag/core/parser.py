"""
Conversion of typed values in structured data responses.
"""
from datetime import datetime
from typing import Any

from pydantic import TypeAdapter, ValidationError

from twintag.core.common import logger

_datetime_adapter = TypeAdapter(datetime)


class Parser:
    """Converts properties flagged by a ``$<property>Type`` marker."""

    @staticmethod
    def parse_special_types(data: Any) -> Any:
        """
        Convert ``dateTime`` properties to ``datetime`` objects, in place.

        Accepts a single instance or a list of instances; other values are
        returned untouched.
        """
        instances = data if isinstance(data, list) else [data]
        for instance in instances:
            if not isinstance(instance, dict):
                continue
            for prop in list(instance):
                if prop.startswith("$"):
                    continue
                if instance.get(f"${prop}Type") == "dateTime" and instance[prop] is not None:
                    try:
                        instance[prop] = _datetime_adapter.validate_python(instance[prop])
                    except ValidationError as e:
                        logger.warning(f"Could not parse dateTime property {prop}: {e}")
        return data
