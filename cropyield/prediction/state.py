"""
Request state machine driving the presentation layer.

    Idle -> InFlight -> Succeeded | Failed
    Succeeded | Failed | Idle -> InFlight   (new request)
    any -> Idle                             (reset)

Each submit() is tagged with a monotonically increasing dispatch id. A
transition is applied only if its id is still the latest one, so a slow
response from a superseded request can never overwrite newer state. There
is no cancellation: a superseded call still runs to completion and its
outcome is dropped.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Union

from cropyield.data.validation import validate_input
from cropyield.prediction.errors import ClassifiedError, classify_error
from cropyield.prediction.types import PredictionInput, PredictionResult

logger = logging.getLogger(__name__)

IDLE = "idle"
IN_FLIGHT = "in_flight"
SUCCEEDED = "succeeded"
FAILED = "failed"


@dataclass(frozen=True)
class RequestState:
    status: str
    dispatch_id: int = 0
    result: Optional[PredictionResult] = None
    error: Optional[ClassifiedError] = None

    @classmethod
    def idle(cls, dispatch_id: int = 0) -> "RequestState":
        return cls(status=IDLE, dispatch_id=dispatch_id)

    @classmethod
    def in_flight(cls, dispatch_id: int) -> "RequestState":
        return cls(status=IN_FLIGHT, dispatch_id=dispatch_id)

    @classmethod
    def succeeded(cls, dispatch_id: int, result: PredictionResult) -> "RequestState":
        return cls(status=SUCCEEDED, dispatch_id=dispatch_id, result=result)

    @classmethod
    def failed(cls, dispatch_id: int, error: ClassifiedError) -> "RequestState":
        return cls(status=FAILED, dispatch_id=dispatch_id, error=error)

    @property
    def is_idle(self) -> bool:
        return self.status == IDLE

    @property
    def is_in_flight(self) -> bool:
        return self.status == IN_FLIGHT

    @property
    def is_succeeded(self) -> bool:
        return self.status == SUCCEEDED

    @property
    def is_failed(self) -> bool:
        return self.status == FAILED


Predictor = Callable[[PredictionInput], PredictionResult]
Listener = Callable[[RequestState], None]


class PredictionController:
    """
    Owns the live RequestState for one form.

    Usage:
        controller = PredictionController(PredictionService())
        controller.subscribe(render)
        state = controller.submit(form_values)
    """

    def __init__(self, predictor: Predictor):
        self._predictor = predictor
        self._lock = threading.Lock()
        self._latest_id = 0
        self._state = RequestState.idle()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> RequestState:
        with self._lock:
            return self._state

    @property
    def is_busy(self) -> bool:
        """True while a request is in flight; callers disable re-invocation."""
        return self.state.is_in_flight

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener for applied transitions; returns an unsubscribe callable."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)
        return unsubscribe

    def begin(self) -> int:
        """Allocate a dispatch id and enter InFlight. Supersedes any earlier request."""
        with self._lock:
            self._latest_id += 1
            dispatch_id = self._latest_id
            self._state = RequestState.in_flight(dispatch_id)
            state = self._state
        self._notify(state)
        return dispatch_id

    def complete(self, dispatch_id: int, result: PredictionResult) -> bool:
        return self._apply(RequestState.succeeded(dispatch_id, result))

    def fail(self, dispatch_id: int, error: ClassifiedError) -> bool:
        return self._apply(RequestState.failed(dispatch_id, error))

    def reset(self) -> None:
        """Return to Idle and orphan whatever is still in flight."""
        with self._lock:
            self._latest_id += 1
            self._state = RequestState.idle(self._latest_id)
            state = self._state
        self._notify(state)

    def submit(self, candidate: Union[Mapping[str, Any], PredictionInput]) -> RequestState:
        """
        Run one prediction through the machine.

        Blocks until the predictor returns. The returned state is the
        outcome of *this* dispatch; it is only applied to the controller
        if no newer request has started in the meantime.
        """
        dispatch_id = self.begin()
        try:
            prediction_input = validate_input(candidate)
            result = self._predictor(prediction_input)
        except Exception as e:
            outcome = RequestState.failed(dispatch_id, classify_error(e))
        else:
            outcome = RequestState.succeeded(dispatch_id, result)

        self._apply(outcome)
        return outcome

    def _apply(self, state: RequestState) -> bool:
        with self._lock:
            if state.dispatch_id != self._latest_id:
                logger.debug(
                    "Discarding stale %s for dispatch %d (latest is %d)",
                    state.status, state.dispatch_id, self._latest_id,
                )
                return False
            self._state = state
        self._notify(state)
        return True

    def _notify(self, state: RequestState) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(state)
            except Exception:
                logger.exception("State listener failed on %s", state.status)
