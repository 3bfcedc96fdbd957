import pytest

from flexpro.db.models import Notification

from .conftest import auth

pytestmark = pytest.mark.anyio


async def add(session, **kw):
    note = Notification(title=kw.pop("title", "Heads up"), message=kw.pop("message", "Something happened"), **kw)
    session.add(note)
    await session.commit()
    return note


async def test_list_shows_own_and_global(client, db, factory):
    me, other = await factory.student(), await factory.student()
    mine = await add(db, user_id=me.id, title="Mine")
    everyone = await add(db, is_global=True, title="Everyone")
    await add(db, user_id=other.id, title="Not mine")

    r = await client.get("/notifications", headers=auth(me))
    assert r.status_code == 200
    assert {n["id"] for n in r.json()["notifications"]} == {str(mine.id), str(everyone.id)}


async def test_take_limits_results(client, db, factory):
    me = await factory.student()
    for i in range(5):
        await add(db, user_id=me.id, title=f"Note {i}")

    r = await client.get("/notifications", headers=auth(me), params={"take": 2})
    assert len(r.json()["notifications"]) == 2

    assert (await client.get("/notifications", headers=auth(me), params={"take": 0})).status_code == 422


async def test_mark_read_only_touches_visible_notifications(client, db, factory):
    me, other = await factory.student(), await factory.student()
    mine = await add(db, user_id=me.id)
    theirs = await add(db, user_id=other.id)

    r = await client.patch(
        "/notifications/read",
        headers=auth(me),
        json={"notification_ids": [str(mine.id), str(theirs.id)]},
    )
    assert r.status_code == 200
    assert r.json()["updated"] == 1

    [note] = (await client.get("/notifications", headers=auth(me))).json()["notifications"]
    assert note["is_read"] is True
    [untouched] = (await client.get("/notifications", headers=auth(other))).json()["notifications"]
    assert untouched["is_read"] is False


async def test_mark_read_needs_ids(client, factory):
    me = await factory.student()
    r = await client.patch("/notifications/read", headers=auth(me), json={"notification_ids": []})
    assert r.status_code == 422
