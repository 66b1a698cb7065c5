"""Endpoint decorator that rejects repeated requests.

Usage:

    @router.post("/products")
    @prevent_duplicate(
        include_field_keys=["productId", "transactionId"],
        optional_values=["CAFEINCODE"],
        expire_time=40_000,
    )
    async def create_product(request: ProductRequest): ...
"""

import functools
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, TypeVar

from pydantic import BaseModel

from dedupguard.core import guard as guard_module
from dedupguard.core.fingerprint import to_payload_view
from dedupguard.exceptions import PayloadConversionError
from dedupguard.models import GuardSpec

logger = logging.getLogger(__name__)

R = TypeVar("R")


def extract_request_body(kwargs: dict[str, Any]) -> BaseModel | None:
    """Find the request body among endpoint arguments.

    FastAPI passes every parameter by keyword; the body is the first
    pydantic model among them.
    """
    for value in kwargs.values():
        if isinstance(value, BaseModel):
            return value
    return None


def prevent_duplicate(
    include_field_keys: Sequence[str] = (),
    optional_values: Sequence[str] = (),
    expire_time: int | None = None,
) -> Callable[[Callable[..., Awaitable[R]]], Callable[..., Awaitable[R]]]:
    """Guard an async endpoint against repeated requests.

    Args:
        include_field_keys: Body fields (wire names) that identify a request
        optional_values: Constant tags appended to the fingerprint
        expire_time: Dedup window in milliseconds (None: settings default)

    Raises:
        GuardConfigurationError: At decoration time, for invalid arguments
    """
    spec = GuardSpec.of(fields=include_field_keys, tags=optional_values, ttl_ms=expire_time)

    def decorator(func: Callable[..., Awaitable[R]]) -> Callable[..., Awaitable[R]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> R:
            payload = None
            if spec.is_active:
                body = extract_request_body(kwargs)
                if body is None:
                    logger.warning(f"[PreventDuplicate] no request body found in arguments of {func.__name__}")
                else:
                    try:
                        payload = to_payload_view(body)
                    except PayloadConversionError as e:
                        logger.warning(
                            f"[PreventDuplicate] bypass for {func.__name__}: payload conversion failed: {e}"
                        )

            await guard_module.get_duplicate_guard().ensure_unique(spec, payload)
            return await func(*args, **kwargs)

        wrapper.guard_spec = spec  # type: ignore[attr-defined]
        return wrapper

    return decorator
