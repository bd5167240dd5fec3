"""Feedback sinks: where lifecycle tags (``start``, ``skip``, ...) go.

A sink advertises whether the platform can deliver feedback at all via
``supported``.  ``notify`` on an unsupported sink does nothing, so the
timer never has to ask what platform it is running on.
"""

from __future__ import annotations


class FeedbackSink:
    """Base sink.  Subclasses implement ``_deliver``."""

    @property
    def supported(self) -> bool:
        return True

    def notify(self, tag: str) -> None:
        if not self.supported:
            return
        self._deliver(tag)

    def _deliver(self, tag: str) -> None:
        raise NotImplementedError


class NullFeedbackSink(FeedbackSink):
    """For platforms with no feedback hardware."""

    @property
    def supported(self) -> bool:
        return False

    def _deliver(self, tag: str) -> None:
        pass


class RecordingFeedbackSink(FeedbackSink):
    """Keeps every delivered tag in ``tags``, oldest first."""

    def __init__(self) -> None:
        self.tags: list[str] = []

    def _deliver(self, tag: str) -> None:
        self.tags.append(tag)

    def clear(self) -> None:
        self.tags.clear()
