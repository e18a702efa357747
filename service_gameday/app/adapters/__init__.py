"""
Adapters package for the Gameday service.

Contains the HTTP client wrapper for the MLB Stats API. Adapters own base
URLs, request shapes, and the mapping of transport failures to shared
errors. Keep them thin and side-effect free outside of explicit calls.
"""

from .statsapi_client import StatsApiClient

__all__ = ["StatsApiClient"]
