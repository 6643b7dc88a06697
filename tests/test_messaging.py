import asyncio
import json

import pytest
from conftest import auth

from fixit.auth import AuthSession
from fixit.domain.messaging.broker import MessageBroker
from fixit.domain.messaging.router import format_snapshot
from fixit.domain.messaging.service import MessagingService
from fixit.models import User


@pytest.fixture
def conversation(client, provider, client_user):
    response = client.post("/conversations", json={"providerId": provider.id}, headers=auth(client_user.id))
    assert response.status_code == 200, response.text
    return response.json()


def send(client, uid, conversation_id, text):
    return client.post(
        f"/conversations/{conversation_id}/messages", json={"text": text}, headers=auth(uid)
    )


def unread(client, uid, conversation_id):
    return client.get(f"/conversations/{conversation_id}", headers=auth(uid)).json()["unreadCount"]


class TestConversations:
    def test_one_conversation_per_pair(self, client, provider, client_user, conversation):
        again = client.post("/conversations", json={"providerId": provider.id}, headers=auth(client_user.id))
        from_provider = client.post(
            "/conversations", json={"clientId": client_user.id}, headers=auth(provider.id)
        )

        assert again.json()["id"] == conversation["id"]
        assert from_provider.json()["id"] == conversation["id"]
        assert conversation["providerName"] == "Pat's Pipes"
        assert conversation["clientName"] == "Casey Client"

    def test_counterpart_must_exist_with_right_role(self, client, client_user, other_client):
        response = client.post("/conversations", json={"providerId": other_client.id}, headers=auth(client_user.id))
        assert response.status_code == 404

    def test_listed_by_latest_activity(self, client, provider, other_provider, client_user, conversation):
        second = client.post(
            "/conversations", json={"providerId": other_provider.id}, headers=auth(client_user.id)
        ).json()
        send(client, client_user.id, conversation["id"], "Still there?")

        listed = client.get("/conversations", headers=auth(client_user.id)).json()
        assert [c["id"] for c in listed] == [conversation["id"], second["id"]]
        assert listed[0]["lastMessage"] == "Still there?"

    def test_outsiders_are_rejected(self, client, other_client, conversation):
        headers = auth(other_client.id)
        assert client.get(f"/conversations/{conversation['id']}", headers=headers).status_code == 403
        assert client.get(f"/conversations/{conversation['id']}/messages", headers=headers).status_code == 403
        assert send(client, other_client.id, conversation["id"], "hi").status_code == 403


class TestMessages:
    def test_send_updates_summary_and_counts_every_message(self, client, provider, client_user, conversation):
        for text in ("Hello", "Are you free Monday?", "  Thanks!  "):
            assert send(client, client_user.id, conversation["id"], text).status_code == 201

        assert unread(client, provider.id, conversation["id"]) == 3
        assert unread(client, client_user.id, conversation["id"]) == 0

        summary = client.get(f"/conversations/{conversation['id']}", headers=auth(provider.id)).json()
        assert summary["lastMessage"] == "Thanks!"
        assert summary["lastMessageDate"] is not None

    def test_messages_in_send_order(self, client, provider, client_user, conversation):
        send(client, client_user.id, conversation["id"], "one")
        reply = send(client, provider.id, conversation["id"], "two").json()
        send(client, client_user.id, conversation["id"], "three")

        messages = client.get(f"/conversations/{conversation['id']}/messages", headers=auth(client_user.id)).json()
        assert [m["text"] for m in messages] == ["one", "two", "three"]
        assert reply["senderType"] == "provider"
        assert reply["senderName"] == "Pat's Pipes"

    def test_empty_message_rejected(self, client, client_user, conversation):
        assert send(client, client_user.id, conversation["id"], "   ").status_code == 422

    def test_mark_read(self, client, provider, client_user, conversation):
        send(client, client_user.id, conversation["id"], "one")
        send(client, client_user.id, conversation["id"], "two")
        send(client, provider.id, conversation["id"], "reply")

        response = client.post(f"/conversations/{conversation['id']}/read", headers=auth(provider.id))
        assert response.json() == {"updated": 2}
        assert unread(client, provider.id, conversation["id"]) == 0
        assert unread(client, client_user.id, conversation["id"]) == 1

        messages = client.get(f"/conversations/{conversation['id']}/messages", headers=auth(provider.id)).json()
        assert [m["read"] for m in messages] == [True, True, False]


class TestLiveStream:
    def test_opening_marks_peer_messages_read(self, client, db, provider, client_user, conversation):
        send(client, client_user.id, conversation["id"], "one")
        send(client, provider.id, conversation["id"], "two")

        service = MessagingService(db, MessageBroker())
        session = AuthSession.from_user(db.get(User, provider.id))
        messages = service.open_stream(conversation["id"], session)

        assert [(m.text, m.read) for m in messages] == [("one", True), ("two", False)]
        assert unread(client, provider.id, conversation["id"]) == 0

    def test_snapshot_event_format(self, client, db, client_user, conversation):
        send(client, client_user.id, conversation["id"], "hello")
        service = MessagingService(db, MessageBroker())

        event = format_snapshot(service.snapshot(conversation["id"]))
        assert event.startswith("event: snapshot\ndata: ")
        assert event.endswith("\n\n")
        payload = json.loads(event.split("data: ", 1)[1])
        assert [m["text"] for m in payload] == ["hello"]

    def test_send_wakes_subscribers(self, client, db, client_user, conversation):
        broker = MessageBroker()
        service = MessagingService(db, broker)
        session = AuthSession.from_user(db.get(User, client_user.id))

        async def scenario():
            queue = broker.subscribe(conversation["id"])
            other = broker.subscribe("another-conversation")
            service.send_message(conversation["id"], "ping", session)
            await asyncio.wait_for(queue.get(), timeout=1)
            assert other.empty()
            broker.unsubscribe(conversation["id"], queue)
            broker.unsubscribe("another-conversation", other)

        asyncio.run(scenario())
        assert broker.subscriber_count(conversation["id"]) == 0


class TestBroker:
    def test_bursts_collapse_into_one_wake_up(self):
        broker = MessageBroker()

        async def scenario():
            queue = broker.subscribe("c1")
            for _ in range(5):
                broker.publish("c1")
            await asyncio.sleep(0)
            return queue.qsize()

        assert asyncio.run(scenario()) == 1

    def test_publish_without_subscribers(self):
        MessageBroker().publish("nobody-listening")

    def test_closed_loop_subscribers_are_dropped(self):
        broker = MessageBroker()

        async def subscribe():
            broker.subscribe("c1")

        asyncio.run(subscribe())
        broker.publish("c1")
        assert broker.subscriber_count("c1") == 0
