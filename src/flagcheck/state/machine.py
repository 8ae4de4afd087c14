from flagcheck.models.types import LifecycleEvent, LifecycleState


class InvalidTransition(ValueError):
    def __init__(self, state: LifecycleState, event: LifecycleEvent):
        super().__init__(f"no transition from {state.value} on {event.value}")
        self.state = state
        self.event = event


def next_state(state: LifecycleState, event: LifecycleEvent) -> LifecycleState:
    state = LifecycleState(state)
    event = LifecycleEvent(event)

    # Forced drain: reachable from anything still holding the client
    if event == LifecycleEvent.SHUTDOWN_REQUESTED:
        if state in (LifecycleState.CLOSED, LifecycleState.FAILED):
            return state
        return LifecycleState.DRAINING

    if state == LifecycleState.STARTING:
        if event == LifecycleEvent.INITIALIZED:
            return LifecycleState.READY
        if event == LifecycleEvent.INIT_FAILED:
            return LifecycleState.FAILED

    if state == LifecycleState.READY:
        if event == LifecycleEvent.EVALUATED:
            return LifecycleState.EVALUATED
        if event == LifecycleEvent.EVAL_FAILED:
            return LifecycleState.FAILED

    if state == LifecycleState.EVALUATED and event == LifecycleEvent.DRAIN:
        return LifecycleState.DRAINING

    if state == LifecycleState.DRAINING and event == LifecycleEvent.CLOSE_COMPLETE:
        return LifecycleState.CLOSED

    raise InvalidTransition(state, event)
