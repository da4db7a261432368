"""Server-rendered frontend that relays content-compliance reviews to a review backend."""

__version__ = "1.0.0"
