from enum import Enum

class LifecycleState(str, Enum):
    STARTING = "STARTING"
    READY = "READY"
    EVALUATED = "EVALUATED"
    DRAINING = "DRAINING"
    CLOSED = "CLOSED"
    FAILED = "FAILED"

class LifecycleEvent(str, Enum):
    INITIALIZED = "INITIALIZED"
    INIT_FAILED = "INIT_FAILED"
    EVALUATED = "EVALUATED"
    EVAL_FAILED = "EVAL_FAILED"
    DRAIN = "DRAIN"
    CLOSE_COMPLETE = "CLOSE_COMPLETE"
    SHUTDOWN_REQUESTED = "SHUTDOWN_REQUESTED"
