import asyncio
import json
from starlette.websockets import WebSocketState

from app.services.broadcast import BroadcastHub, TASK_CREATED, TASK_DELETED


class FakeSocket:
    def __init__(self, connected: bool = True, fail: bool = False):
        state = WebSocketState.CONNECTED if connected else WebSocketState.DISCONNECTED
        self.client_state = state
        self.application_state = state
        self.fail = fail
        self.sent = []
        self.closed = False

    async def send_text(self, message: str):
        if self.fail:
            raise RuntimeError("connection reset")
        self.sent.append(json.loads(message))

    async def close(self):
        self.closed = True


def test_publish_reaches_open_subscribers():
    hub = BroadcastHub()
    a, b = FakeSocket(), FakeSocket()
    hub.register(a)
    hub.register(b)

    delivered = asyncio.run(hub.publish(TASK_DELETED, {"id": "abc"}))

    assert delivered == 2
    assert a.sent == [{"event": "task:deleted", "data": {"id": "abc"}}]
    assert b.sent == a.sent

def test_publish_skips_closed_and_drops_failing():
    hub = BroadcastHub()
    ok, closed, broken = FakeSocket(), FakeSocket(connected=False), FakeSocket(fail=True)
    for ws in (ok, closed, broken):
        hub.register(ws)

    delivered = asyncio.run(hub.publish(TASK_CREATED, {"id": "1"}))

    assert delivered == 1
    assert closed.sent == []
    assert hub.subscriber_count == 2

def test_publish_without_subscribers():
    assert asyncio.run(BroadcastHub().publish(TASK_CREATED, {"id": "1"})) == 0

def test_publish_unserializable_payload_does_not_raise():
    hub = BroadcastHub()
    ws = FakeSocket()
    hub.register(ws)
    assert asyncio.run(hub.publish(TASK_CREATED, {"bad": object()})) == 0
    assert ws.sent == []
    assert hub.subscriber_count == 1

def test_unregister_and_shutdown():
    hub = BroadcastHub()
    a, b = FakeSocket(), FakeSocket()
    hub.register(a)
    hub.register(b)
    hub.unregister(a)
    hub.unregister(a)
    assert hub.subscriber_count == 1

    asyncio.run(hub.shutdown())
    assert b.closed is True
    assert hub.subscriber_count == 0
