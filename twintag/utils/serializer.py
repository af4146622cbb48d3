"""
Serialization utilities for Twintag SDK.
"""
import enum
import json

from datetime import datetime, date, time
from decimal import Decimal

from pydantic import BaseModel

class JSONEncoder(json.JSONEncoder):
    """Custom JSON serializer for special types."""
    def default(self, obj):
        # Datetime objects
        if isinstance(obj, (datetime, date, time)):
            return obj.isoformat()
        # Timedelta objects
        elif hasattr(obj, 'total_seconds'):
            return obj.total_seconds()
        # Pydantic models keep their wire aliases
        elif isinstance(obj, BaseModel):
            return obj.model_dump(by_alias=True, exclude_none=True)
        elif isinstance(obj, enum.Enum):
            return obj.value
        # Bytes or bytearray
        elif isinstance(obj, (bytes, bytearray)):
            return obj.hex()
        elif isinstance(obj, Decimal):
            return float(obj)
        elif isinstance(obj, (set, frozenset)):
            return list(obj)
        return super().default(obj)

def serialize_to_json(obj):
    """Serializes any object to JSON using the custom encoder"""
    return json.dumps(obj, cls=JSONEncoder)
