import asyncio
import json
from datetime import datetime

from controllers.conversation_controller import (
    APOLOGY_REPLY,
    CANCELLED_REPLY,
    FALLBACK_REPLY,
    IMAGE_FAILURE_REPLY,
    ConversationController,
)
from models.conversation import UploadedFile
from models.errors import RelayCallFailed
from models.inference import InferenceModel
from tests.fakes import FakeRelay


def _clock():
    return datetime(2024, 5, 1, 9, 36)


def _controller(relay, **kwargs):
    return ConversationController(relay, clock=_clock, **kwargs)


async def _until_pending(controller, key):
    while key not in controller.pending:
        await asyncio.sleep(0)


def test_send_appends_user_then_generated_reply():
    relay = FakeRelay(result={"generated_text": "X"})
    controller = _controller(relay)
    controller.set_input("Birthday ideas?")

    reply = asyncio.run(controller.handle_send())

    user, assistant = controller.messages
    assert (user.id, user.text, user.is_user, user.timestamp) == (1, "Birthday ideas?", True, "9:36 AM")
    assert assistant is reply
    assert (assistant.id, assistant.text, assistant.is_user) == (2, "X", False)
    assert relay.calls == [(InferenceModel.TEXT_GENERATION, "Birthday ideas?")]
    assert controller.input_text == ""
    assert not controller.is_generating
    assert controller.offers_feedback


def test_user_message_is_appended_before_reply_arrives():
    async def scenario():
        relay = FakeRelay(result={"generated_text": "later"}, gate=asyncio.Event())
        controller = _controller(relay)
        task = asyncio.create_task(controller.handle_send("hello"))
        await _until_pending(controller, 1)

        assert [m.text for m in controller.messages] == ["hello"]
        assert controller.is_generating
        assert not controller.can_send
        assert not controller.offers_feedback

        relay.gate.set()
        await task
        return controller

    controller = asyncio.run(scenario())
    assert [m.text for m in controller.messages] == ["hello", "later"]
    assert not controller.is_generating


def test_blank_input_is_a_no_op():
    relay = FakeRelay(result={"generated_text": "X"})
    controller = _controller(relay)

    for text in ("", "   ", "\n\t"):
        assert asyncio.run(controller.handle_send(text)) is None

    assert controller.messages == ()
    assert relay.calls == []


def test_missing_generated_text_uses_fallback():
    for result in ({"something_else": 1}, {"generated_text": ""}, [{"generated_text": "X"}], None):
        controller = _controller(FakeRelay(result=result))
        reply = asyncio.run(controller.handle_send("hi"))
        assert reply.text == FALLBACK_REPLY


def test_relay_failure_appends_apology():
    controller = _controller(FakeRelay(error=RelayCallFailed()))
    reply = asyncio.run(controller.handle_send("hi"))

    assert reply.text == APOLOGY_REPLY
    assert not reply.is_user
    assert len(controller.messages) == 2
    assert not controller.is_generating


def test_conversation_stays_usable_after_failure():
    relay = FakeRelay(error=RelayCallFailed())
    controller = _controller(relay)
    asyncio.run(controller.handle_send("first"))

    relay.error = None
    relay.result = {"generated_text": "second reply"}
    reply = asyncio.run(controller.handle_send("second"))

    assert reply.text == "second reply"
    assert [m.id for m in controller.messages] == [1, 2, 3, 4]


def test_timeout_appends_apology_and_clears_generating():
    relay = FakeRelay(result={"generated_text": "never"}, gate=asyncio.Event())
    controller = _controller(relay, timeout=0.01)

    reply = asyncio.run(controller.handle_send("hello"))

    assert reply.text == APOLOGY_REPLY
    assert not controller.is_generating


def test_cancel_outstanding_send():
    async def scenario():
        controller = _controller(FakeRelay(result={"generated_text": "x"}, gate=asyncio.Event()))
        task = asyncio.create_task(controller.handle_send("hello"))
        await _until_pending(controller, 1)
        assert controller.cancel(1)
        return controller, await task

    controller, reply = asyncio.run(scenario())
    assert reply.text == CANCELLED_REPLY
    assert not controller.is_generating
    assert not controller.cancel(1)


def test_concurrent_sends_keep_generating_until_all_settle():
    async def scenario():
        first_gate, second_gate = asyncio.Event(), asyncio.Event()
        relay = FakeRelay(result={"generated_text": "ok"})
        gates = iter([first_gate, second_gate])

        async def gated_call(model, inputs):
            await next(gates).wait()
            return {"generated_text": f"re: {inputs}"}

        relay.call = gated_call
        controller = _controller(relay)
        first = asyncio.create_task(controller.handle_send("one"))
        await _until_pending(controller, 1)
        second = asyncio.create_task(controller.handle_send("two"))
        await _until_pending(controller, 2)

        second_gate.set()
        await second
        assert controller.is_generating
        first_gate.set()
        await first
        return controller

    controller = asyncio.run(scenario())
    assert not controller.is_generating
    # replies land in settle order, not submission order
    assert [m.text for m in controller.messages] == ["one", "two", "re: two", "re: one"]
    assert [m.id for m in controller.messages] == [1, 2, 3, 4]


def test_image_upload_classifies_and_reports_result():
    predictions = [{"label": "balloon", "score": 0.91}]
    relay = FakeRelay(result=predictions)
    controller = _controller(relay)
    upload = UploadedFile(name="party.png", media_type="image/png", data=b"\x89PNG")

    reply = asyncio.run(controller.handle_file_upload(upload))

    note, assistant = controller.messages
    assert note.is_user and "party.png" in note.text
    assert assistant is reply
    assert reply.text == "I analyzed the image and found: " + json.dumps(predictions, indent=2)
    model, inputs = relay.calls[0]
    assert model is InferenceModel.IMAGE_CLASSIFICATION
    assert inputs.startswith("data:image/png;base64,")


def test_non_image_upload_only_notes_filename():
    relay = FakeRelay(result=[])
    controller = _controller(relay)

    reply = asyncio.run(controller.handle_file_upload(UploadedFile(name="notes.pdf", media_type="application/pdf")))

    assert reply is None
    assert len(controller.messages) == 1
    assert controller.messages[0].is_user
    assert controller.messages[0].text.endswith("notes.pdf")
    assert relay.calls == []


def test_image_failure_is_visible():
    controller = _controller(FakeRelay(error=RelayCallFailed()))
    reply = asyncio.run(controller.handle_file_upload(UploadedFile(name="a.jpg", media_type="image/jpeg", data=b"x")))

    assert reply.text == IMAGE_FAILURE_REPLY
    assert len(controller.messages) == 2


def test_image_read_failure_is_visible_without_relay_call(tmp_path):
    relay = FakeRelay(result=[])
    controller = _controller(relay)
    upload = UploadedFile(name="gone.png", media_type="image/png", path=str(tmp_path / "gone.png"))

    reply = asyncio.run(controller.handle_file_upload(upload))

    assert reply.text == IMAGE_FAILURE_REPLY
    assert relay.calls == []


def test_no_file_selected_is_ignored():
    controller = _controller(FakeRelay())
    assert asyncio.run(controller.handle_file_upload(None)) is None
    assert controller.messages == ()


def test_seed_messages_and_listener_notifications():
    seed = [("Got any ideas?", True, "9:35 AM"), ("Of course!", False, "9:36 AM")]
    controller = _controller(FakeRelay(result={"generated_text": "sure"}), seed=seed)
    seen = []
    unsubscribe = controller.subscribe(lambda c: seen.append(len(c.messages)))

    asyncio.run(controller.handle_send("Thanks"))
    unsubscribe()
    controller.set_input("ignored")

    assert [m.id for m in controller.messages] == [1, 2, 3, 4]
    assert seen[0] == 3
    assert seen[-1] == 4


def test_unsubscribe_twice_is_harmless():
    controller = _controller(FakeRelay())
    seen = []
    unsubscribe = controller.subscribe(lambda c: seen.append(c.input_text))

    unsubscribe()
    unsubscribe()
    controller.set_input("after")

    assert seen == []
