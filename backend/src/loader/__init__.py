"""Fetch-and-decode entry points."""

from .service import fetch_and_decode

__all__ = ["fetch_and_decode"]
