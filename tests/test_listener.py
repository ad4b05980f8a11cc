"""
Tests for listener.py - polling, dispatch and start/stop behaviour.
"""

import threading
import time

import pytest
import requests

from airwatch.listener import CommandListener, extract_command


def message_update(update_id, text, chat_id=42):
    return {
        "update_id": update_id,
        "message": {"message_id": update_id, "chat": {"id": chat_id}, "text": text},
    }


class ScriptedGateway:
    """get_updates() returns scripted batches, then empty polls."""

    def __init__(self, batches=None, delay=0.01):
        self.batches = list(batches or [])
        self.delay = delay
        self.offsets = []

    def get_updates(self, offset=None):
        self.offsets.append(offset)
        time.sleep(self.delay)
        if self.batches:
            batch = self.batches.pop(0)
            if isinstance(batch, Exception):
                raise batch
            return batch
        return []


class RecordingHandler:
    def __init__(self, expected=1):
        self.handled = []
        self.done = threading.Event()
        self.expected = expected

    def handle(self, chat_id, text):
        self.handled.append((chat_id, text))
        if len(self.handled) >= self.expected:
            self.done.set()


# ============================================================================
# extract_command()
# ============================================================================


class TestExtractCommand:
    def test_command(self):
        assert extract_command(message_update(1, "/check Ban Suan", 7)) == (
            "7",
            "/check Ban Suan",
        )

    def test_plain_text_ignored(self):
        assert extract_command(message_update(1, "hello")) is None

    def test_non_message_update_ignored(self):
        assert extract_command({"update_id": 1, "edited_message": {}}) is None

    def test_message_without_text_ignored(self):
        update = {"update_id": 1, "message": {"chat": {"id": 1}, "photo": []}}
        assert extract_command(update) is None


# ============================================================================
# poll_once()
# ============================================================================


class TestPollOnce:
    def test_dispatches_commands_inline_when_not_started(self):
        gateway = ScriptedGateway(
            [[message_update(5, "/help"), message_update(6, "hi"), message_update(7, "/pm25")]]
        )
        handler = RecordingHandler()
        listener = CommandListener(gateway, handler)

        offset = listener.poll_once()

        assert offset == 8
        assert handler.handled == [("42", "/help"), ("42", "/pm25")]

    def test_skips_update_without_id(self):
        broken = {"message": {"chat": {"id": 42}, "text": "/help"}}
        gateway = ScriptedGateway([[broken, message_update(3, "/pm25")]])
        handler = RecordingHandler()

        offset = CommandListener(gateway, handler).poll_once()

        assert offset == 4
        assert handler.handled == [("42", "/pm25")]

    def test_empty_poll_keeps_offset(self):
        listener = CommandListener(ScriptedGateway(), RecordingHandler())
        assert listener.poll_once(12) == 12

    def test_passes_offset(self):
        gateway = ScriptedGateway()
        CommandListener(gateway, RecordingHandler()).poll_once(99)
        assert gateway.offsets == [99]


# ============================================================================
# start() / stop()
# ============================================================================


class TestLifecycle:
    def test_handles_commands_in_background(self):
        gateway = ScriptedGateway([[message_update(1, "/help"), message_update(2, "/pm25")]])
        handler = RecordingHandler(expected=2)
        listener = CommandListener(gateway, handler, max_workers=2)

        listener.start()
        try:
            assert handler.done.wait(timeout=5)
            deadline = time.monotonic() + 5
            while 3 not in gateway.offsets and time.monotonic() < deadline:
                time.sleep(0.01)
        finally:
            listener.stop()

        assert sorted(text for _, text in handler.handled) == ["/help", "/pm25"]
        # Confirmed updates are not requested again
        assert 3 in gateway.offsets

    def test_stop_ends_polling(self):
        listener = CommandListener(ScriptedGateway(), RecordingHandler())

        listener.start()
        assert listener.running
        listener.stop()
        listener._thread.join(timeout=5)

        assert not listener.running

    def test_cannot_start_twice(self):
        listener = CommandListener(ScriptedGateway(), RecordingHandler())
        listener.start()
        try:
            with pytest.raises(RuntimeError):
                listener.start()
        finally:
            listener.stop()

    def test_stop_waits_for_command_in_progress(self):
        finished = threading.Event()

        class SlowHandler:
            def handle(self, chat_id, text):
                time.sleep(0.2)
                finished.set()

        gateway = ScriptedGateway([[message_update(1, "/pm25")]])
        listener = CommandListener(gateway, SlowHandler())

        listener.start()
        deadline = time.monotonic() + 5
        while 2 not in gateway.offsets and time.monotonic() < deadline:
            time.sleep(0.01)
        listener.stop(wait=True)

        assert finished.is_set()

    def test_survives_polling_errors(self):
        gateway = ScriptedGateway(
            [requests.exceptions.ConnectionError("down"), [message_update(1, "/help")]]
        )
        handler = RecordingHandler()
        listener = CommandListener(gateway, handler, error_backoff=0)

        listener.start()
        try:
            assert handler.done.wait(timeout=5)
        finally:
            listener.stop()

        assert handler.handled == [("42", "/help")]

    def test_survives_unexpected_errors(self):
        gateway = ScriptedGateway([KeyError("result"), [message_update(1, "/help")]])
        handler = RecordingHandler()
        listener = CommandListener(gateway, handler, error_backoff=0)

        listener.start()
        try:
            assert handler.done.wait(timeout=5)
        finally:
            listener.stop()

        assert handler.handled == [("42", "/help")]
