"""Tests for the inspect controller driving a mocked rendering surface."""

import pytest
from unittest.mock import AsyncMock, MagicMock, call
import asyncio

from form_autopilot.core.errors import SessionConflictError
from form_autopilot.core.models import InspectMode, Template
from form_autopilot.inspect.controller import InspectController, create_inspect_controller


def hover_chain(*records):
    return [
        {"tag": tag, "selector": selector, "attributes": {}, "fillableCount": count}
        for tag, selector, count in records
    ]


FORM_CHAIN = hover_chain(("input", "#email", 0), ("form", "#signup", 3), ("body", "body", 3))


class TestInspectController:
    """Test cases for InspectController."""

    @pytest.fixture
    def surface(self):
        return AsyncMock()

    @pytest.fixture
    def controller(self, surface):
        return InspectController(surface, cancel_key="Escape")

    @pytest.mark.asyncio
    async def test_start_installs_overlay_and_listeners(self, controller, surface):
        token = await controller.start(InspectMode.IMPORT)

        assert controller.is_active
        assert controller.current_token == token
        assert token.mode == InspectMode.IMPORT
        surface.install_overlay.assert_awaited_once()
        surface.install_listeners.assert_awaited_once_with("Escape")

    @pytest.mark.asyncio
    async def test_second_start_is_rejected_and_first_session_survives(self, controller, surface):
        template = Template(name="X")
        first = await controller.start(InspectMode.FILL, template)

        with pytest.raises(SessionConflictError):
            await controller.start(InspectMode.FILL, template)

        assert controller.current_token == first
        surface.install_overlay.assert_awaited_once()
        surface.remove_overlay.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_concurrent_starts_admit_one_session(self, controller):
        results = await asyncio.gather(
            controller.start(InspectMode.IMPORT),
            controller.start(InspectMode.IMPORT),
            return_exceptions=True
        )

        errors = [r for r in results if isinstance(r, SessionConflictError)]
        assert len(errors) == 1
        assert controller.is_active

    @pytest.mark.asyncio
    async def test_pointer_move_frames_nearest_form(self, controller, surface):
        await controller.start(InspectMode.IMPORT)

        selector = await controller.handle_pointer_move(FORM_CHAIN)
        await controller.handle_pointer_move(FORM_CHAIN)

        assert selector == "#signup"
        surface.frame.assert_awaited_once_with("#signup")

    @pytest.mark.asyncio
    async def test_pointer_move_while_idle_is_ignored(self, controller, surface):
        assert await controller.handle_pointer_move(FORM_CHAIN) is None
        surface.frame.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_commit_delivers_selector_and_pending_template(self, controller, surface):
        template = Template(name="Pending")
        received = []
        controller.subscribe(received.append)
        token = await controller.start(InspectMode.FILL, template)

        await controller.handle_event({"type": "move", "chain": FORM_CHAIN})
        await controller.handle_event({"type": "commit"})
        outcome = await controller.wait(token)

        assert outcome.committed
        assert outcome.selector == "#signup"
        assert outcome.pending_template is template
        assert received == [outcome]
        assert not controller.is_active
        surface.remove_listeners.assert_awaited_once()
        surface.remove_overlay.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_click_before_any_target_keeps_session(self, controller):
        await controller.start(InspectMode.IMPORT)

        await controller.handle_click()

        assert controller.is_active

    @pytest.mark.asyncio
    async def test_cancel_key_signals_cancellation(self, controller, surface):
        token = await controller.start(InspectMode.IMPORT)

        await controller.handle_event({"type": "cancel", "key": "Escape"})
        outcome = await controller.wait(token)

        assert outcome.cancelled
        assert outcome.reason == "cancel_key"
        assert outcome.selector is None
        assert not controller.is_active

    @pytest.mark.asyncio
    async def test_other_keys_do_not_cancel(self, controller):
        await controller.start(InspectMode.IMPORT)

        await controller.handle_key("Enter")

        assert controller.is_active

    @pytest.mark.asyncio
    async def test_stop_is_idempotent(self, controller, surface):
        await controller.stop()
        await controller.stop()

        assert not controller.is_active
        assert surface.remove_listeners.await_count == 2
        assert surface.remove_overlay.await_count == 2

    @pytest.mark.asyncio
    async def test_stop_cancels_active_session(self, controller):
        async_listener = AsyncMock()
        controller.subscribe(async_listener)
        token = await controller.start(InspectMode.FILL)

        await controller.stop()
        outcome = await controller.wait(token)

        assert outcome.cancelled
        assert outcome.reason == "stopped"
        async_listener.assert_awaited_once_with(outcome)

    @pytest.mark.asyncio
    async def test_stop_tears_down_even_when_a_step_fails(self, controller, surface):
        surface.remove_listeners.side_effect = RuntimeError("page closed")
        await controller.start(InspectMode.IMPORT)

        await controller.stop()

        assert not controller.is_active
        surface.remove_overlay.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failed_install_rolls_back(self, controller, surface):
        surface.install_listeners.side_effect = RuntimeError("navigation")

        with pytest.raises(RuntimeError):
            await controller.start(InspectMode.IMPORT)

        assert not controller.is_active
        assert surface.method_calls[-2:] == [call.remove_listeners(), call.remove_overlay()]

    @pytest.mark.asyncio
    async def test_unsubscribe(self, controller):
        listener = MagicMock()
        unsubscribe = controller.subscribe(listener)
        unsubscribe()
        unsubscribe()

        await controller.start(InspectMode.IMPORT)
        await controller.stop()

        listener.assert_not_called()

    @pytest.mark.asyncio
    async def test_wait_unknown_token(self, controller):
        token = await controller.start(InspectMode.IMPORT)
        await controller.stop()
        await controller.wait(token)

        with pytest.raises(KeyError):
            await controller.wait(token)

    @pytest.mark.asyncio
    async def test_finished_sessions_leave_no_waiters(self, controller):
        received = []
        controller.subscribe(received.append)

        for _ in range(50):
            await controller.start(InspectMode.IMPORT)
            await controller.handle_key("Escape")

        assert len(received) == 50
        assert controller._waiters == {}

    @pytest.mark.asyncio
    async def test_wait_after_finish_only_answers_latest_session(self, controller):
        first = await controller.start(InspectMode.IMPORT)
        await controller.stop()
        second = await controller.start(InspectMode.IMPORT)
        await controller.handle_key("Escape")

        outcome = await controller.wait(second)

        assert outcome.reason == "cancel_key"
        with pytest.raises(KeyError):
            await controller.wait(first)

    @pytest.mark.asyncio
    async def test_wait_before_commit(self, controller):
        token = await controller.start(InspectMode.IMPORT)
        waiter = asyncio.ensure_future(controller.wait(token))
        await asyncio.sleep(0)

        await controller.handle_event({"type": "move", "chain": FORM_CHAIN})
        await controller.handle_event({"type": "commit"})
        outcome = await waiter

        assert outcome.selector == "#signup"
        assert controller._waiters == {}
        with pytest.raises(KeyError):
            await controller.wait(token)

    @pytest.mark.asyncio
    async def test_unknown_events_are_ignored(self, controller):
        await controller.start(InspectMode.IMPORT)

        await controller.handle_event({"type": "scroll"})

        assert controller.is_active

    def test_factory_uses_configured_cancel_key(self):
        controller = create_inspect_controller(AsyncMock())

        assert controller.cancel_key == "Escape"
        assert controller.current_token is None
