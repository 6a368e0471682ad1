"""BoardGate — abuse-resistant admission control for a shared whiteboard stream."""

__version__ = "0.1.0"
