"""Inspect session state machine.

Transitions are pure: each returns the next state plus the side effects the
owner must perform, so the machine is testable without a rendering surface.
"""

from dataclasses import dataclass, field
from typing import NamedTuple, Optional, Tuple, Union

from form_autopilot.core.errors import SessionConflictError
from form_autopilot.core.models import InspectMode, Template


@dataclass(frozen=True)
class Idle:
    """No session is running."""


@dataclass(frozen=True)
class Active:
    """A session is running; ``target_selector`` is the currently framed container."""
    token: str
    mode: InspectMode
    pending_template: Optional[Template] = field(default=None, compare=False)
    target_selector: Optional[str] = None


InspectState = Union[Idle, Active]


@dataclass(frozen=True)
class InstallOverlay:
    pass


@dataclass(frozen=True)
class RemoveOverlay:
    pass


@dataclass(frozen=True)
class InstallListeners:
    cancel_key: str


@dataclass(frozen=True)
class RemoveListeners:
    pass


@dataclass(frozen=True)
class FrameTarget:
    selector: str


@dataclass(frozen=True)
class Commit:
    token: str
    mode: InspectMode
    selector: str
    pending_template: Optional[Template] = field(default=None, compare=False)


@dataclass(frozen=True)
class Cancel:
    token: str
    mode: InspectMode
    reason: str = "cancel_key"
    pending_template: Optional[Template] = field(default=None, compare=False)


Effect = Union[InstallOverlay, RemoveOverlay, InstallListeners, RemoveListeners, FrameTarget, Commit, Cancel]


class Transition(NamedTuple):
    state: InspectState
    effects: Tuple[Effect, ...]


TEARDOWN: Tuple[Effect, ...] = (RemoveListeners(), RemoveOverlay())


def start(
    state: InspectState,
    token: str,
    mode: InspectMode,
    cancel_key: str,
    pending_template: Optional[Template] = None
) -> Transition:
    """Idle -> Active. Raises SessionConflictError when a session is already active."""
    if isinstance(state, Active):
        raise SessionConflictError()
    return Transition(
        Active(token=token, mode=mode, pending_template=pending_template),
        (InstallOverlay(), InstallListeners(cancel_key))
    )


def pointer_moved(state: InspectState, target_selector: Optional[str]) -> Transition:
    """Re-frame the overlay when the resolved container changes."""
    if not isinstance(state, Active) or not target_selector:
        return Transition(state, ())
    if target_selector == state.target_selector:
        return Transition(state, ())
    return Transition(
        Active(
            token=state.token,
            mode=state.mode,
            pending_template=state.pending_template,
            target_selector=target_selector
        ),
        (FrameTarget(target_selector),)
    )


def clicked(state: InspectState) -> Transition:
    """Commit the framed container; a click before anything is framed is ignored."""
    if not isinstance(state, Active) or not state.target_selector:
        return Transition(state, ())
    return Transition(
        Idle(),
        TEARDOWN + (Commit(state.token, state.mode, state.target_selector, state.pending_template),)
    )


def key_pressed(state: InspectState, key: str, cancel_key: str) -> Transition:
    """The cancel key ends the session without side effects beyond teardown."""
    if not isinstance(state, Active) or key != cancel_key:
        return Transition(state, ())
    return Transition(
        Idle(),
        TEARDOWN + (Cancel(state.token, state.mode, "cancel_key", state.pending_template),)
    )


def stop(state: InspectState) -> Transition:
    """Always tear down. Stopping an active session also reports it as cancelled."""
    if isinstance(state, Active):
        return Transition(
            Idle(),
            TEARDOWN + (Cancel(state.token, state.mode, "stopped", state.pending_template),)
        )
    return Transition(Idle(), TEARDOWN)
