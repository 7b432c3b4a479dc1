"""Helpers called from generated template functions.

Interpolations are started as they are reached and written to the output as
PLACEHOLDER. Once every statement has run, the results are gathered in
enqueue order and swapped in for the placeholders from left to right, so
completion order never affects where a result lands.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Iterable
from typing import Any

PLACEHOLDER = "rW8tNqJd3Lk"


def enqueue(pending: list[asyncio.Future[Any]], value: Any) -> None:
    """Start an interpolation result and add it to the pending queue."""
    if inspect.isawaitable(value):
        pending.append(asyncio.ensure_future(value))
        return
    future = asyncio.get_running_loop().create_future()
    future.set_result(value)
    pending.append(future)


async def collect(pending: list[asyncio.Future[Any]]) -> list[Any]:
    """Wait for every pending result, returned in enqueue order.

    If one result fails, or the wait itself is cancelled, the others are
    cancelled before the error propagates.
    """
    try:
        return list(await asyncio.gather(*pending))
    except BaseException:
        await discard(pending)
        raise


async def discard(pending: list[asyncio.Future[Any]]) -> None:
    """Cancel every unfinished result and wait for the cancellations to land."""
    for future in pending:
        future.cancel()
    await asyncio.gather(*pending, return_exceptions=True)


def substitute(output: str, results: Iterable[Any], placeholder: str = PLACEHOLDER) -> str:
    """Replace the i-th placeholder occurrence with the i-th result."""
    results = list(results)
    parts = output.split(placeholder)
    if len(parts) - 1 != len(results):
        raise ValueError(
            f"output holds {len(parts) - 1} placeholder(s) for {len(results)} result(s); "
            f"template text or a statement wrote the reserved placeholder {placeholder!r}"
        )
    chunks = [parts[0]]
    for result, part in zip(results, parts[1:]):
        chunks.append(str(result))
        chunks.append(part)
    return "".join(chunks)
