"""Owner of the single inspect session and runner of its side effects."""

import asyncio
import inspect as pyinspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Union
from uuid import uuid4

from form_autopilot.config import settings
from form_autopilot.core.errors import AutofillError
from form_autopilot.core.models import InspectMode, Template
from form_autopilot.inspect import machine
from form_autopilot.inspect.containers import find_form_container
from form_autopilot.inspect.snapshot import chain_from_payload
from form_autopilot.utils.logging import get_logger

logger = get_logger(__name__)


class InspectSurface(Protocol):
    """Rendering surface that performs the machine's side effects."""

    async def install_overlay(self) -> None: ...

    async def remove_overlay(self) -> None: ...

    async def install_listeners(self, cancel_key: str) -> None: ...

    async def remove_listeners(self) -> None: ...

    async def frame(self, selector: str) -> None: ...


@dataclass(frozen=True)
class InspectToken:
    """Opaque handle returned to callers that start a session."""
    id: str
    mode: InspectMode


@dataclass
class InspectOutcome:
    """Commit or cancellation of a session."""
    token: InspectToken
    selector: Optional[str] = None
    cancelled: bool = False
    reason: Optional[str] = None
    pending_template: Optional[Template] = None

    @property
    def committed(self) -> bool:
        return not self.cancelled and self.selector is not None


OutcomeListener = Callable[[InspectOutcome], Union[None, Awaitable[None]]]


class InspectController:
    """
    Holds the one process-wide inspect session.

    ``start`` rejects a second session immediately instead of queueing it.
    Page events are fed in through ``handle_event``; commits and
    cancellations are delivered to subscribers and to ``wait`` callers.
    """

    def __init__(self, surface: InspectSurface, cancel_key: Optional[str] = None):
        self.surface = surface
        self.cancel_key = cancel_key or settings.inspect_cancel_key
        self.logger = logger.bind(component="inspect_controller")

        self._state: machine.InspectState = machine.Idle()
        self._listeners: List[OutcomeListener] = []
        self._waiters: Dict[str, asyncio.Future] = {}
        self._finished: Optional[InspectOutcome] = None

    @property
    def state(self) -> machine.InspectState:
        return self._state

    @property
    def is_active(self) -> bool:
        return isinstance(self._state, machine.Active)

    @property
    def current_token(self) -> Optional[InspectToken]:
        if isinstance(self._state, machine.Active):
            return InspectToken(self._state.token, self._state.mode)
        return None

    def subscribe(self, listener: OutcomeListener) -> Callable[[], None]:
        """Register a commit/cancel listener; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def start(self, mode: InspectMode, pending_template: Optional[Template] = None) -> InspectToken:
        """
        Start a session.

        Args:
            mode: Whether the selection imports a template or feeds a fill
            pending_template: Template retained for fill mode

        Returns:
            Token identifying the session

        Raises:
            SessionConflictError: A session is already active
        """
        token = InspectToken(uuid4().hex, InspectMode(mode))
        try:
            transition = machine.start(self._state, token.id, token.mode, self.cancel_key, pending_template)
        except AutofillError:
            self.logger.warning(
                "Inspect start rejected",
                mode=token.mode.value,
                active_token=self._state.token
            )
            raise
        # State must change before the first await.
        self._state = transition.state
        self._waiters[token.id] = asyncio.get_running_loop().create_future()
        self.logger.info(
            "Inspect session started",
            token=token.id,
            mode=token.mode.value,
            has_pending_template=pending_template is not None
        )
        try:
            await self._run(transition.effects)
        except Exception:
            await self.stop()
            raise
        return token

    async def stop(self) -> None:
        """Tear down listeners and overlay; idempotent and safe from any state."""
        transition = machine.stop(self._state)
        self._state = transition.state
        await self._run(transition.effects)

    async def wait(self, token: InspectToken) -> InspectOutcome:
        """
        Wait for the session identified by ``token`` to commit or cancel.

        A session that already finished is answered once from the last
        delivered outcome; any other unknown token raises ``KeyError``.
        """
        future = self._waiters.get(token.id)
        if future is None:
            finished = self._finished
            if finished is None or finished.token.id != token.id:
                raise KeyError(f"Unknown inspect session: {token.id}")
            self._finished = None
            return finished
        try:
            return await future
        finally:
            self._waiters.pop(token.id, None)
            if self._finished is not None and self._finished.token.id == token.id:
                self._finished = None

    async def handle_pointer_move(self, chain: List[Dict[str, Any]]) -> Optional[str]:
        """Resolve the nearest form-like container of the hovered element and frame it."""
        if not self.is_active:
            return None
        hovered = chain_from_payload(chain)
        if hovered is None:
            return None
        target = find_form_container(hovered)
        transition = machine.pointer_moved(self._state, target.selector)
        self._state = transition.state
        await self._run(transition.effects)
        return target.selector

    async def handle_click(self) -> None:
        transition = machine.clicked(self._state)
        self._state = transition.state
        await self._run(transition.effects)

    async def handle_key(self, key: str) -> None:
        transition = machine.key_pressed(self._state, key, self.cancel_key)
        self._state = transition.state
        await self._run(transition.effects)

    async def handle_event(self, payload: Dict[str, Any]) -> None:
        """Dispatch one event reported by the page."""
        event_type = payload.get("type")
        if event_type == "move":
            await self.handle_pointer_move(payload.get("chain") or [])
        elif event_type == "commit":
            await self.handle_click()
        elif event_type == "cancel":
            await self.handle_key(payload.get("key") or self.cancel_key)
        else:
            self.logger.debug("Ignoring inspect event", event_type=event_type)

    async def _run(self, effects) -> None:
        # Teardown effects each run even if an earlier one fails.
        for effect in effects:
            try:
                await self._perform(effect)
            except Exception as e:
                if isinstance(effect, (machine.InstallOverlay, machine.InstallListeners)):
                    raise
                self.logger.error(
                    "Inspect effect failed",
                    effect=type(effect).__name__,
                    error=str(e)
                )

    async def _perform(self, effect: machine.Effect) -> None:
        if isinstance(effect, machine.InstallOverlay):
            await self.surface.install_overlay()
        elif isinstance(effect, machine.InstallListeners):
            await self.surface.install_listeners(effect.cancel_key)
        elif isinstance(effect, machine.RemoveListeners):
            await self.surface.remove_listeners()
        elif isinstance(effect, machine.RemoveOverlay):
            await self.surface.remove_overlay()
        elif isinstance(effect, machine.FrameTarget):
            await self.surface.frame(effect.selector)
        elif isinstance(effect, machine.Commit):
            self.logger.info("Inspect session committed", token=effect.token, selector=effect.selector)
            await self._deliver(InspectOutcome(
                token=InspectToken(effect.token, effect.mode),
                selector=effect.selector,
                pending_template=effect.pending_template
            ))
        elif isinstance(effect, machine.Cancel):
            self.logger.info("Inspect session cancelled", token=effect.token, reason=effect.reason)
            await self._deliver(InspectOutcome(
                token=InspectToken(effect.token, effect.mode),
                cancelled=True,
                reason=effect.reason,
                pending_template=effect.pending_template
            ))

    async def _deliver(self, outcome: InspectOutcome) -> None:
        future = self._waiters.pop(outcome.token.id, None)
        self._finished = outcome
        if future is not None and not future.done():
            future.set_result(outcome)
        for listener in list(self._listeners):
            result = listener(outcome)
            if pyinspect.isawaitable(result):
                await result


def create_inspect_controller(surface: InspectSurface, cancel_key: Optional[str] = None) -> InspectController:
    """Factory function to create an inspect controller."""
    return InspectController(surface, cancel_key)
