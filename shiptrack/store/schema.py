"""
JSON schema for the persisted shipment collection.

Optional fields stay loose so files written by earlier releases still
load. The schema pins the shape the ledger and analytics depend on.
"""

LOCATION_EVENT_SCHEMA = {
    "type": "object",
    "required": ["location"],
    "properties": {
        "location": {"type": "string"},
        "timestamp": {"type": "string"},
        "officer": {"type": "string"},
        "action": {"type": "string"},
        "coordinates": {
            "oneOf": [
                {"type": "null"},
                {
                    "type": "array",
                    "items": {"type": "number"},
                    "minItems": 2,
                    "maxItems": 2,
                },
            ],
        },
    },
}

SHIPMENT_SCHEMA = {
    "type": "object",
    "required": ["id"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "name": {"type": "string"},
        "supply": {"type": "string"},
        "initLoc": {"type": "string"},
        "finalLoc": {"type": "string"},
        "date": {"type": "string"},
        "status": {"type": ["string", "null"]},
        "currentLocation": {"type": ["string", "null"]},
        "locationHistory": {"type": "array", "items": LOCATION_EVENT_SCHEMA},
        "receivedAt": {"type": ["string", "null"]},
        "tamperedAt": {"type": ["string", "null"]},
        "version": {"type": "integer", "minimum": 1},
    },
}

SHIPMENT_COLLECTION_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Shipment collection",
    "type": "array",
    "items": SHIPMENT_SCHEMA,
}
