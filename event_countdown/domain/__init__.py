from event_countdown.domain.event import EventRecord
from event_countdown.domain.state import CountdownState
from event_countdown.domain.target import CountdownTarget

__all__ = ["EventRecord", "CountdownState", "CountdownTarget"]
