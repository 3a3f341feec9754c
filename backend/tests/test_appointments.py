from datetime import datetime, timedelta, timezone

import pytest

from app.models import Appointment

FUTURE = (datetime.now(timezone.utc) + timedelta(days=3)).date()


@pytest.fixture
def booked(client, make_user, make_therapist):
    """Client + approved therapist + one booked appointment."""

    async def _setup():
        client_user, client_headers = await make_user("jane@example.com", name="Jane")
        therapist_user, therapist_headers, profile = await make_therapist("dr@example.com", name="Dr. Smith")
        res = await client.post(
            "/booking",
            json={"therapist_profile_id": profile.id, "date": FUTURE.isoformat(), "time": "10:00"},
            headers=client_headers,
        )
        assert res.status_code == 201, res.text
        return {
            "appointment": res.json()["appointment"],
            "client": (client_user, client_headers),
            "therapist": (therapist_user, therapist_headers),
        }

    return _setup


async def set_status(client, appt_id, headers, status, **extra):
    return await client.patch(f"/appointments/{appt_id}/status", json={"status": status, **extra}, headers=headers)


class TestListAppointments:
    async def test_both_sides_see_it(self, client, booked):
        ctx = await booked()
        appt_id = ctx["appointment"]["id"]

        for _, headers in (ctx["client"], ctx["therapist"]):
            res = await client.get("/appointments", headers=headers)
            assert res.status_code == 200
            rows = res.json()
            assert [a["id"] for a in rows] == [appt_id]
            assert rows[0]["client"]["name"] == "Jane"
            assert rows[0]["therapist"]["name"] == "Dr. Smith"

    async def test_outsider_sees_nothing(self, client, booked, make_user):
        await booked()
        _, headers = await make_user("other@example.com")
        res = await client.get("/appointments", headers=headers)
        assert res.json() == []

    async def test_filters(self, client, session, booked):
        ctx = await booked()
        client_user, headers = ctx["client"]
        therapist_user, _ = ctx["therapist"]
        session.add(
            Appointment(
                client_id=client_user["id"],
                therapist_id=therapist_user["id"],
                scheduled_at=datetime(2020, 1, 6, 9, 0, tzinfo=timezone.utc),
                duration=60,
                status="completed",
            )
        )
        await session.commit()

        upcoming = (await client.get("/appointments", params={"when": "upcoming"}, headers=headers)).json()
        past = (await client.get("/appointments", params={"when": "past"}, headers=headers)).json()
        completed = (await client.get("/appointments", params={"status": "completed"}, headers=headers)).json()
        everything = (await client.get("/appointments", headers=headers)).json()

        assert [a["status"] for a in upcoming] == ["booked"]
        assert [a["status"] for a in past] == ["completed"]
        assert [a["status"] for a in completed] == ["completed"]
        # oldest first
        assert [a["status"] for a in everything] == ["completed", "booked"]

    async def test_bad_status_filter(self, client, booked):
        ctx = await booked()
        res = await client.get("/appointments", params={"status": "lost"}, headers=ctx["client"][1])
        assert res.status_code == 422


class TestStatusTransitions:
    async def test_client_can_cancel(self, client, booked):
        ctx = await booked()
        res = await set_status(client, ctx["appointment"]["id"], ctx["client"][1], "cancelled")
        assert res.status_code == 200
        assert res.json()["status"] == "cancelled"

    async def test_therapist_completes_with_link(self, client, booked):
        ctx = await booked()
        res = await set_status(
            client, ctx["appointment"]["id"], ctx["therapist"][1], "completed",
            meeting_link="https://meet.example.com/abc",
        )
        assert res.status_code == 200
        assert res.json()["status"] == "completed"
        assert res.json()["meeting_link"] == "https://meet.example.com/abc"

    @pytest.mark.parametrize("target", ["completed", "no_show"])
    async def test_client_cannot_close_out(self, client, booked, target):
        ctx = await booked()
        res = await set_status(client, ctx["appointment"]["id"], ctx["client"][1], target)
        assert res.status_code == 409
        assert res.json()["detail"] == f"Only the therapist can mark an appointment {target}"

        # still booked
        listed = (await client.get("/appointments", headers=ctx["client"][1])).json()
        assert listed[0]["status"] == "booked"

    async def test_terminal_states_are_final(self, client, booked):
        ctx = await booked()
        appt_id = ctx["appointment"]["id"]
        await set_status(client, appt_id, ctx["therapist"][1], "no_show")

        res = await set_status(client, appt_id, ctx["therapist"][1], "cancelled")
        assert res.status_code == 409

    async def test_back_to_booked_is_rejected(self, client, booked):
        ctx = await booked()
        res = await set_status(client, ctx["appointment"]["id"], ctx["therapist"][1], "booked")
        assert res.status_code == 409

    async def test_outsider_forbidden(self, client, booked, make_user):
        ctx = await booked()
        _, headers = await make_user("other@example.com")
        res = await set_status(client, ctx["appointment"]["id"], headers, "cancelled")
        assert res.status_code == 403

    async def test_missing_appointment(self, client, make_user):
        _, headers = await make_user("jane@example.com")
        res = await set_status(client, 999, headers, "cancelled")
        assert res.status_code == 404
