"""
Settle-all fan-out: await every task and keep each result or failure.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Generic, Iterable, List, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Result of one fanned-out task: either a value or the error it raised."""

    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def settle_all(awaitables: Iterable[Awaitable[T]]) -> List[Outcome[T]]:
    """Run awaitables concurrently and wait for all of them to finish.

    Never short-circuits on the first failure. Outcomes are returned in
    submission order regardless of completion order.
    """
    results = await asyncio.gather(*awaitables, return_exceptions=True)
    return [
        Outcome(error=result) if isinstance(result, BaseException) else Outcome(value=result)
        for result in results
    ]
