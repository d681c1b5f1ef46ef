"""State machine for paginated feed loading."""

from enum import Enum

import structlog


logger = structlog.get_logger()


class FeedState(str, Enum):
    """Loading state of a paginated feed.

    - IDLE: Nothing requested yet
    - LOADING_FIRST_PAGE: First page request in flight
    - LOADING_NEXT_PAGE: Follow-up page request in flight
    - LOADED: Last request succeeded
    - FAILED: Last request failed
    """

    IDLE = "IDLE"
    LOADING_FIRST_PAGE = "LOADING_FIRST_PAGE"
    LOADING_NEXT_PAGE = "LOADING_NEXT_PAGE"
    LOADED = "LOADED"
    FAILED = "FAILED"


# A first-page load may restart at any time; it discards older requests.
_VALID_TRANSITIONS: dict[FeedState, set[FeedState]] = {
    FeedState.IDLE: {FeedState.LOADING_FIRST_PAGE},
    FeedState.LOADING_FIRST_PAGE: {
        FeedState.LOADING_FIRST_PAGE,
        FeedState.LOADED,
        FeedState.FAILED,
    },
    FeedState.LOADING_NEXT_PAGE: {
        FeedState.LOADING_FIRST_PAGE,
        FeedState.LOADED,
        FeedState.FAILED,
    },
    FeedState.LOADED: {FeedState.LOADING_FIRST_PAGE, FeedState.LOADING_NEXT_PAGE},
    FeedState.FAILED: {FeedState.LOADING_FIRST_PAGE, FeedState.LOADING_NEXT_PAGE},
}


class FeedStateTransitionError(Exception):
    """Raised when an illegal state transition is attempted."""

    def __init__(
        self,
        feed_name: str,
        from_state: FeedState,
        to_state: FeedState,
    ) -> None:
        """Initialize the transition error.

        Args:
            feed_name: Name of the feed.
            from_state: Current state.
            to_state: Attempted target state.
        """
        self.feed_name = feed_name
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Illegal state transition for feed '{feed_name}': "
            f"{from_state.value} -> {to_state.value}"
        )


class FeedStateMachine:
    """Enforces valid feed transitions and logs every change."""

    def __init__(
        self,
        feed_name: str,
        initial_state: FeedState = FeedState.IDLE,
    ) -> None:
        self._feed_name = feed_name
        self._state = initial_state
        self._log = logger.bind(component="feed", feed=feed_name)

    @property
    def state(self) -> FeedState:
        """Get the current state."""
        return self._state

    @property
    def is_loading(self) -> bool:
        """Check if a page request is in flight."""
        return self._state in (
            FeedState.LOADING_FIRST_PAGE,
            FeedState.LOADING_NEXT_PAGE,
        )

    def can_transition_to(self, target: FeedState) -> bool:
        """Check if a transition to the target state is valid."""
        return target in _VALID_TRANSITIONS.get(self._state, set())

    def transition_to(self, target: FeedState) -> None:
        """Transition to a new state.

        Raises:
            FeedStateTransitionError: If the transition is invalid.
        """
        if not self.can_transition_to(target):
            self._log.error(
                "illegal_state_transition",
                from_state=self._state.value,
                to_state=target.value,
            )
            raise FeedStateTransitionError(self._feed_name, self._state, target)

        old_state = self._state
        self._state = target
        self._log.info(
            "state_transition",
            from_state=old_state.value,
            to_state=target.value,
        )
