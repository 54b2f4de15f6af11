"""Kount OAuth authentication."""

from .authenticator import Authenticator

__all__ = ["Authenticator"]
