"""Data transfer objects."""

from taller.application.dto import requests, responses

__all__ = ["requests", "responses"]
