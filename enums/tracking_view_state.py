from enum import Enum


class TrackingViewState(str, Enum):
    LOADING = "loading"
    POLLING = "polling"
    SUCCESS = "success"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (TrackingViewState.SUCCESS, TrackingViewState.ERROR)
