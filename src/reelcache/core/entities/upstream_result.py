"""Typed outcomes of upstream calls.

Upstream calls are captured as an explicit result instead of relying on
exception handlers, so the refresh-and-retry policy is an ordinary branch
on the result type.
"""

import asyncio
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from reelcache.core.exceptions import UpstreamRejectedError, UpstreamUnavailableError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """The call succeeded."""

    value: T


@dataclass(frozen=True)
class AuthRejected:
    """The upstream rejected the credential used for the call."""

    error: UpstreamRejectedError


@dataclass(frozen=True)
class Failed:
    """The call failed for any other reason, including timeouts."""

    error: BaseException


UpstreamResult = Union[Ok[T], AuthRejected, Failed]


async def capture(call: Awaitable[T], timeout: float) -> "UpstreamResult[T]":
    """Await an upstream call and classify its outcome.

    Args:
        call: The awaitable performing the upstream request.
        timeout: Seconds after which the call counts as failed.

    Returns:
        ``Ok`` with the value, ``AuthRejected`` on a credential rejection,
        or ``Failed`` for any other error.
    """
    try:
        value = await asyncio.wait_for(call, timeout)
    except UpstreamRejectedError as exc:
        return AuthRejected(exc)
    except Exception as exc:
        return Failed(exc)
    return Ok(value)


async def call_upstream(call: Awaitable[T], timeout: float) -> T:
    """Await an upstream call and return its value or raise a mapped error.

    A credential rejection is re-raised as is so a surrounding
    ``call_with_*`` can refresh and retry.

    Raises:
        UpstreamRejectedError: The upstream rejected the credential.
        UpstreamUnavailableError: Any other failure, including timeouts.
            The original error is chained as ``__cause__``.
    """
    result = await capture(call, timeout)
    if isinstance(result, AuthRejected):
        raise result.error
    if isinstance(result, Failed):
        raise UpstreamUnavailableError() from result.error
    return result.value
