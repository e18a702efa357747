#!/usr/bin/env python3
"""
Warm the gateway cache for a range of game dates.

Requests the aggregate games endpoint of a running Gameday gateway for every
date in the range so schedules, live feeds and people batches are cached
before users arrive. Prints a JSON summary per date.
"""

import argparse
import asyncio
import json
import os
import sys
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx


def date_range(start: date, end: date) -> List[date]:
    """Inclusive list of dates from ``start`` to ``end``."""
    if end < start:
        raise ValueError("end date must not be before start date")
    return [start + timedelta(days=offset) for offset in range((end - start).days + 1)]


async def _warm_date(
    client: httpx.AsyncClient,
    semaphore: asyncio.Semaphore,
    day: date,
    nationality: Optional[str],
) -> Dict[str, Any]:
    params = {"date": day.isoformat()}
    if nationality:
        params["nationality"] = nationality

    async with semaphore:
        try:
            response = await client.get("/api/games", params=params)
        except httpx.HTTPError as exc:
            return {"date": day.isoformat(), "status": "error", "error": str(exc)}

    if response.status_code != 200:
        return {"date": day.isoformat(), "status": "error", "http_status": response.status_code}

    body = response.json()
    return {
        "date": day.isoformat(),
        "status": "ok",
        "total_games": body.get("total_games", 0),
        "enriched_games": body.get("enriched_games", 0),
        "failed_games": body.get("failed_games", []),
    }


async def warm(
    *,
    gateway_url: str,
    start: date,
    end: date,
    nationality: Optional[str] = None,
    concurrency: int = 2,
    timeout: float = 60.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict[str, Any]:
    """Execute cache warming and return the summary."""
    days = date_range(start, end)
    semaphore = asyncio.Semaphore(max(1, concurrency))

    async with httpx.AsyncClient(base_url=gateway_url, timeout=timeout, transport=transport) as client:
        results = await asyncio.gather(*(_warm_date(client, semaphore, day, nationality) for day in days))

    return {
        "gateway_url": gateway_url,
        "dates": len(days),
        "warmed": sum(1 for result in results if result["status"] == "ok"),
        "failed": sum(1 for result in results if result["status"] != "ok"),
        "results": list(results),
    }


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date: {value} (expected YYYY-MM-DD)") from None


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Warm the Gameday gateway cache for a date range.")
    parser.add_argument("--gateway-url", default=os.getenv("GAMEDAY_GATEWAY_URL", "http://localhost:8000"), help="Gateway base URL")
    parser.add_argument("--start", type=_parse_date, default=date.today(), help="First date to warm (YYYY-MM-DD)")
    parser.add_argument("--end", type=_parse_date, default=None, help="Last date to warm, inclusive (defaults to --start)")
    parser.add_argument("--nationality", default=None, help="Optional nationality code to request")
    parser.add_argument("--concurrency", type=int, default=2, help="Concurrent date requests")
    parser.add_argument("--timeout", type=float, default=60.0, help="Per-request timeout in seconds")
    parser.add_argument("--output", type=Path, default=None, help="Optional path to write JSON summary")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    try:
        summary = asyncio.run(
            warm(
                gateway_url=args.gateway_url,
                start=args.start,
                end=args.end or args.start,
                nationality=args.nationality,
                concurrency=args.concurrency,
                timeout=args.timeout,
            )
        )
    except KeyboardInterrupt:
        return 130
    except Exception as exc:  # pragma: no cover - CLI surface
        print(f"[cache-warm] failed: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(summary, indent=2))

    if args.output:
        args.output.write_text(json.dumps(summary, indent=2))

    return 0 if summary["failed"] == 0 else 2


if __name__ == "__main__":
    raise SystemExit(main())
