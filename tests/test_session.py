import asyncio

import pytest

from axsnap import observe
from axsnap.session import Session

from fakes import FakePage, element, fast_settings, make_session


@pytest.mark.asyncio
async def test_replace_refs_is_wholesale():
    session, _ = make_session()
    session.replace_refs({"r1": "a", "r2": "b"})
    session.replace_refs({"r1": "c"})
    assert session.refs == {"r1": "c"}
    assert session.get_element_by_ref("r2") is None


@pytest.mark.asyncio
async def test_observe_installs_ref_table():
    session, page = make_session([element("r1", "link", "Docs"), element("r2", "button", "Save")])
    snapshot = await observe(session, verbosity="minimal")
    assert [ref.name for ref in snapshot.refs] == ["Docs", "Save"]
    assert session.get_element_by_ref("r2") is page.handles["r2"]


@pytest.mark.asyncio
async def test_observe_twice_on_unchanged_page_is_stable():
    session, _ = make_session([element("r1", "link", "Docs"), element("r2", "button", "Save")])
    first = await observe(session)
    second = await observe(session)
    assert [(ref.role, ref.name) for ref in first.refs] == [(ref.role, ref.name) for ref in second.refs]


@pytest.mark.asyncio
async def test_run_serializes_work_on_one_session():
    session, _ = make_session()
    events = []

    async def job(name):
        events.append(f"{name}:start")
        await asyncio.sleep(0.01)
        events.append(f"{name}:end")

    await asyncio.gather(session.run(lambda: job("a")), session.run(lambda: job("b")))
    assert events == ["a:start", "a:end", "b:start", "b:end"]


@pytest.mark.asyncio
async def test_sessions_do_not_share_refs():
    first = Session(FakePage([element("r1")]), settings=fast_settings())
    second = Session(FakePage([element("r1"), element("r2")]), settings=fast_settings())
    await asyncio.gather(observe(first), observe(second))
    assert list(first.refs) == ["r1"]
    assert list(second.refs) == ["r1", "r2"]
    assert first.id != second.id


@pytest.mark.asyncio
async def test_run_touches_last_used_at():
    session, _ = make_session()
    session.last_used_at -= 100
    stale = session.last_used_at

    async def job():
        return "done"

    assert await session.run(job) == "done"
    assert session.last_used_at > stale
