"""SmartRest — adaptive rest timer for strength training."""

__version__ = "0.1.0"
