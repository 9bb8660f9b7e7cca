"""Unit tests for the crawl frontier."""

import asyncio

import pytest

from docspider.crawl.frontier import Frontier
from docspider.crawl.models import PageTask


@pytest.mark.asyncio
async def test_claim_skips_duplicate_seeds() -> None:
    """Test that the first occurrence of a path decides its section."""
    frontier = Frontier(
        [
            PageTask("/docs/x", "A"),
            PageTask("/docs/x", "B"),
            PageTask("/docs/y", "A"),
        ]
    )

    first = await frontier.claim()
    second = await frontier.claim()

    assert first == PageTask("/docs/x", "A")
    assert second == PageTask("/docs/y", "A")
    assert frontier.visited == frozenset({"/docs/x", "/docs/y"})
    assert frontier.in_flight == 2


@pytest.mark.asyncio
async def test_offer_rejects_visited_and_queued_paths() -> None:
    """Test that offer() enqueues each path at most once."""
    frontier = Frontier([PageTask("/docs/a", "A"), PageTask("/docs/b", "A")])
    await frontier.claim()

    assert await frontier.offer("/docs/a", "Discovered") is False
    assert await frontier.offer("/docs/b", "Discovered") is False
    assert await frontier.offer("/docs/c", "Discovered") is True
    assert await frontier.offer("/docs/c", "Discovered") is False
    assert frontier.pending == 2


@pytest.mark.asyncio
async def test_claim_returns_none_when_exhausted() -> None:
    """Test exhaustion once the queue is empty and nothing is in flight."""
    frontier = Frontier([PageTask("/docs/a", "A")])

    await frontier.claim()
    await frontier.task_done()

    assert await frontier.claim() is None


@pytest.mark.asyncio
async def test_claim_waits_for_in_flight_discoveries() -> None:
    """Test that an idle claimer receives paths offered by an in-flight task."""
    frontier = Frontier([PageTask("/docs/a", "A")])
    await frontier.claim()

    waiter = asyncio.create_task(frontier.claim())
    await asyncio.sleep(0)
    assert not waiter.done()

    await frontier.offer("/docs/b", "Discovered")
    await frontier.task_done()

    assert await asyncio.wait_for(waiter, timeout=1) == PageTask("/docs/b", "Discovered")


@pytest.mark.asyncio
async def test_waiting_claimers_released_when_last_task_finishes() -> None:
    """Test that every idle worker observes exhaustion."""
    frontier = Frontier([PageTask("/docs/a", "A")])
    await frontier.claim()

    waiters = [asyncio.create_task(frontier.claim()) for _ in range(3)]
    await asyncio.sleep(0)
    await frontier.task_done()

    results = await asyncio.wait_for(asyncio.gather(*waiters), timeout=1)
    assert results == [None, None, None]


@pytest.mark.asyncio
async def test_task_done_without_claim_raises() -> None:
    """Test that unmatched task_done() calls are rejected."""
    frontier = Frontier()

    with pytest.raises(ValueError):
        await frontier.task_done()
