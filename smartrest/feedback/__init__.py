"""Feedback package."""

from .haptics import FeedbackSink, NullFeedbackSink, RecordingFeedbackSink

__all__ = ["FeedbackSink", "NullFeedbackSink", "RecordingFeedbackSink"]
