"""Flight search gateway over the Duffel offer request API."""

__version__ = "0.1.0"
