from datetime import datetime
from types import SimpleNamespace

from app.services.conversations import group_conversations

ME = 1


def msg(id, sender_id, receiver_id, text, read=False, sender=None, receiver=None):
    return SimpleNamespace(
        id=id,
        sender_id=sender_id,
        receiver_id=receiver_id,
        message=text,
        read=read,
        created_at=datetime(2030, 1, 1, 12, id),
        sender=sender,
        receiver=receiver,
    )


class TestGroupConversations:
    def test_groups_by_counterpart_newest_first(self):
        me = SimpleNamespace(name="Me", role="client")
        ann = SimpleNamespace(name="Ann", role="therapist")
        bob = SimpleNamespace(name="Bob", role="therapist")
        messages = [
            msg(4, 2, ME, "see you", sender=ann, receiver=me),
            msg(3, ME, 3, "thanks bob", sender=me, receiver=bob),
            msg(2, 2, ME, "hello again", sender=ann, receiver=me),
            msg(1, ME, 2, "hi ann", read=True, sender=me, receiver=ann),
        ]

        convs = group_conversations(messages, ME)

        assert [c["id"] for c in convs] == [2, 3]
        ann_conv = convs[0]
        assert ann_conv["other_user"] == {"id": 2, "name": "Ann", "role": "therapist"}
        assert ann_conv["last_message"]["message"] == "see you"
        assert ann_conv["unread_count"] == 2
        # my own unread messages don't count
        assert convs[1]["unread_count"] == 0

    def test_missing_counterpart(self):
        convs = group_conversations([msg(1, 9, ME, "hi")], ME)
        assert convs[0]["other_user"] == {"id": 9, "name": "Unknown user", "role": "unknown"}

    def test_empty(self):
        assert group_conversations([], ME) == []


class TestMessengerApi:
    async def test_send_and_read_thread(self, client, make_user):
        jane, jane_h = await make_user("jane@example.com", name="Jane")
        dr, dr_h = await make_user("dr@example.com", role="therapist", name="Dr. Smith")

        res = await client.post("/messenger", json={"receiver_id": dr["id"], "message": "  Hello!  "}, headers=jane_h)
        assert res.status_code == 201
        assert res.json()["message"] == "Hello!"
        assert res.json()["read"] is False
        await client.post("/messenger", json={"receiver_id": jane["id"], "message": "Hi Jane"}, headers=dr_h)
        await client.post("/messenger", json={"receiver_id": dr["id"], "message": "Question"}, headers=jane_h)

        convs = (await client.get("/messenger/conversations", headers=dr_h)).json()
        assert len(convs) == 1
        assert convs[0]["other_user"]["name"] == "Jane"
        assert convs[0]["last_message"]["message"] == "Question"
        assert convs[0]["unread_count"] == 2

        thread = (await client.get(f"/messenger/{jane['id']}", headers=dr_h)).json()
        assert [m["message"] for m in thread] == ["Hello!", "Hi Jane", "Question"]
        # Jane's messages are read once the therapist opens the thread
        assert all(m["read"] for m in thread if m["sender_id"] == jane["id"])

        convs = (await client.get("/messenger/conversations", headers=dr_h)).json()
        assert convs[0]["unread_count"] == 0
        # opening the thread doesn't touch the reader's own outgoing messages
        jane_convs = (await client.get("/messenger/conversations", headers=jane_h)).json()
        assert jane_convs[0]["unread_count"] == 1

    async def test_blank_message(self, client, make_user):
        _, jane_h = await make_user("jane@example.com")
        dr, _ = await make_user("dr@example.com", role="therapist")
        res = await client.post("/messenger", json={"receiver_id": dr["id"], "message": "   "}, headers=jane_h)
        assert res.status_code == 400

    async def test_message_self(self, client, make_user):
        jane, jane_h = await make_user("jane@example.com")
        res = await client.post("/messenger", json={"receiver_id": jane["id"], "message": "note"}, headers=jane_h)
        assert res.status_code == 400

    async def test_unknown_recipient(self, client, make_user):
        _, jane_h = await make_user("jane@example.com")
        res = await client.post("/messenger", json={"receiver_id": 999, "message": "hi"}, headers=jane_h)
        assert res.status_code == 404

    async def test_thread_with_unknown_user(self, client, make_user):
        _, jane_h = await make_user("jane@example.com")
        res = await client.get("/messenger/999", headers=jane_h)
        assert res.status_code == 404

    async def test_no_conversations(self, client, make_user):
        _, jane_h = await make_user("jane@example.com")
        res = await client.get("/messenger/conversations", headers=jane_h)
        assert res.status_code == 200
        assert res.json() == []
