from sqlalchemy import select, func

from app.models import EducationalContent, TherapistProfile
from seed_data import DEMO_PASSWORD, THERAPISTS, seed_data
from conftest import login


async def test_seed_is_idempotent(session):
    first = await seed_data(session)
    second = await seed_data(session)

    assert first == {"therapists": len(THERAPISTS), "content": 3}
    assert second == {"therapists": 0, "content": 0}
    profiles = (await session.execute(select(func.count(TherapistProfile.id)))).scalar()
    assert profiles == len(THERAPISTS)


async def test_seeded_data_is_searchable(client, session, make_user):
    await seed_data(session)
    _, headers = await make_user("jane@example.com")

    therapists = (await client.get("/therapists", params={"q": "hand"}, headers=headers)).json()
    content = (await client.get("/education", headers=headers)).json()

    assert [t["users"]["name"] for t in therapists] == ["Emily Rodriguez"]
    assert len(content) == 3
    assert all(c["is_approved"] for c in content)


async def test_seeded_therapist_can_log_in(client, session):
    await seed_data(session)
    res = await login(client, THERAPISTS[0]["email"], DEMO_PASSWORD)
    assert res.status_code == 200
    assert res.json()["needs_profile_setup"] is False
    assert (await session.execute(select(func.count(EducationalContent.id)))).scalar() == 3
