import asyncio
from unittest.mock import ANY, patch

import pytest

from hn_preview.models import Loaded, Loading, Unset
from hn_preview.session import PreviewSession


@pytest.fixture
def session(gateway):
    return PreviewSession(gateway)


@pytest.fixture
def transitions(session):
    seen = []
    session.subscribe(lambda state: seen.append(type(state).__name__))
    return seen


def test_starts_unset(session):
    assert session.state == Unset()
    assert session.cached(1) is None


@pytest.mark.asyncio
async def test_success_goes_loading_then_loaded(gateway, session, transitions):
    gateway.add_story(1, kids=[10])
    gateway.add_comment(10)

    state = await session.select_story(1)

    assert transitions == ["Loading", "Loaded"]
    assert isinstance(state, Loaded)
    assert state is session.state
    assert state.data.item.id == 1
    assert [c.id for c in state.data.comments] == [10]


@pytest.mark.asyncio
async def test_failure_goes_loading_then_unset(gateway, session, transitions):
    gateway.fail(1)

    state = await session.select_story(1)

    assert transitions == ["Loading", "Unset"]
    assert state == Unset()
    assert session.cached(1) is None


@pytest.mark.asyncio
async def test_second_selection_is_served_from_cache(gateway, session, transitions):
    gateway.add_story(1, kids=[10])
    gateway.add_comment(10)

    first = await session.select_story(1)
    calls_after_first = list(gateway.calls)
    second = await session.select_story(1)

    assert gateway.calls == calls_after_first
    assert transitions == ["Loading", "Loaded", "Loaded"]
    assert second.data is first.data


@pytest.mark.asyncio
async def test_cache_hit_transitions_without_suspending(gateway, session):
    gateway.add_story(1)
    await session.select_story(1)

    # One step of the coroutine is enough to complete a cached selection
    coro = session.select_story(1)
    with pytest.raises(StopIteration) as exc_info:
        coro.send(None)
    assert isinstance(exc_info.value.value, Loaded)


@pytest.mark.asyncio
async def test_failed_story_is_retried_on_next_selection(gateway, session):
    gateway.add_story(1)
    gateway.fail(1)
    assert await session.select_story(1) == Unset()

    gateway.failing.clear()
    state = await session.select_story(1)

    assert isinstance(state, Loaded)
    assert gateway.item_calls() == [1, 1]


@pytest.mark.asyncio
async def test_stale_resolution_does_not_overwrite_newer_selection(gateway, session):
    gateway.add_story(1)
    gateway.add_story(2)
    release_first = gateway.gate(1)

    first = asyncio.ensure_future(session.select_story(1))
    await asyncio.sleep(0)
    assert session.state == Loading()

    await session.select_story(2)
    assert session.state.data.item.id == 2

    release_first.set()
    await first

    assert session.state.data.item.id == 2
    # The abandoned resolution still completed, so it is cached
    assert session.cached(1).item.id == 1


@pytest.mark.asyncio
async def test_stale_failure_does_not_reset_newer_selection(gateway, session):
    gateway.add_story(2)
    gateway.fail(1)
    release_first = gateway.gate(1)

    first = asyncio.ensure_future(session.select_story(1))
    await asyncio.sleep(0)
    await session.select_story(2)
    release_first.set()
    await first

    assert isinstance(session.state, Loaded)
    assert session.state.data.item.id == 2


@pytest.mark.asyncio
async def test_overlapping_selections_share_one_resolution(gateway, session):
    gateway.add_story(1, kids=[10])
    gateway.add_comment(10)
    release = gateway.gate(1)

    first = asyncio.ensure_future(session.select_story(1))
    second = asyncio.ensure_future(session.select_story(1))
    await asyncio.sleep(0)
    release.set()
    _, latest = await asyncio.gather(first, second)

    assert gateway.item_calls() == [1, 10]
    assert isinstance(latest, Loaded)
    assert latest.data is session.cached(1)


@pytest.mark.asyncio
async def test_list_top_story_previews_uses_session_gateway(gateway, session):
    gateway.set_top([1, 2, 3])
    for sid in (1, 2, 3):
        gateway.add_story(sid)

    stories = await session.list_top_story_previews(2)

    assert [s.id for s in stories] == [1, 2]
    assert session.state == Unset()


@pytest.mark.asyncio
async def test_failed_resolution_outliving_its_caller_is_collected(gateway, session):
    gateway.fail(1)
    release = gateway.gate(1)

    caller = asyncio.ensure_future(session.select_story(1))
    await asyncio.sleep(0)
    caller.cancel()
    with pytest.raises(asyncio.CancelledError):
        await caller

    with patch("hn_preview.session.logger") as mock_logger:
        release.set()
        for _ in range(5):
            await asyncio.sleep(0)

    assert session._inflight == {}
    mock_logger.debug.assert_any_call("story_resolution_failed", story_id=1, error=ANY)
    assert session.cached(1) is None
