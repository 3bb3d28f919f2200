"""Message queue interface used to publish interaction events."""
from typing import Protocol


class MessageQueue(Protocol):
    def send(self, topic: str, payload: dict) -> None:
        """Publish one message. Implementations raise on delivery failure."""
        ...
