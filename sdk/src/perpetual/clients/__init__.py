"""
Client utilities for interacting with the venue.

This package provides the REST client used to fetch markets and fees and to
submit signed orders, a paper client with the same surface for dry runs,
and the adapter around the Stark crypto backend.
"""

from .http_exchange import ExchangeHttpClient  # noqa: F401
from .paper_exchange import PaperExchangeClient  # noqa: F401
