"""Request fingerprinting.

fingerprint = selected field values (in guard field order) + constant tags,
joined with ":". Missing or null fields are skipped, not replaced.
"""

import dataclasses
import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from dedupguard.exceptions import PayloadConversionError
from dedupguard.models import GuardSpec

DELIMITER = ":"


def canonical_str(value: Any) -> str:
    """Render a payload value as fingerprint text.

    Args:
        value: Field value (never None here)

    Returns:
        str as is, booleans as true/false, numbers as JSON numbers,
        everything else as compact JSON with sorted keys
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return json.dumps(value)
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


def build_fingerprint(spec: GuardSpec, payload: Mapping[str, Any]) -> str:
    """Build the fingerprint string for a request.

    Args:
        spec: Guard configuration (field order, tags)
        payload: Field name -> value view of the request body

    Returns:
        Fingerprint string; "" when no field matched and no tags are set
    """
    values = [
        canonical_str(payload[field])
        for field in spec.fields
        if payload.get(field) is not None
    ]
    fingerprint = DELIMITER.join(values)
    if spec.tags:
        return fingerprint + DELIMITER + DELIMITER.join(spec.tags)
    return fingerprint


def to_payload_view(body: Any) -> dict[str, Any] | None:
    """Convert a request body object into a field mapping.

    Pydantic models are dumped in JSON mode by alias, so field names match
    what clients send on the wire.

    Args:
        body: Pydantic model, mapping, dataclass instance or None

    Returns:
        Field mapping, or None if there is no body

    Raises:
        PayloadConversionError: If the body cannot be represented as a mapping
    """
    if body is None:
        return None
    try:
        if isinstance(body, BaseModel):
            return body.model_dump(mode="json", by_alias=True)
        if isinstance(body, Mapping):
            return {str(key): value for key, value in body.items()}
        if dataclasses.is_dataclass(body) and not isinstance(body, type):
            return dataclasses.asdict(body)
    except Exception as e:
        raise PayloadConversionError(f"{type(body).__name__}: {e}") from e
    raise PayloadConversionError(f"Unsupported payload type: {type(body).__name__}")
