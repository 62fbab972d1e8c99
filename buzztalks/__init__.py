"""BuzzTalks social backend: document store, live subscriptions and fan-out services."""

__version__ = "0.1.0"
