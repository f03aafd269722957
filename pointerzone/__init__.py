"""Zone-based pointer interaction for video frames."""

__version__ = "0.1.0"
