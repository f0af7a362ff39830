"""Tijara marketplace backend: listings, buyer/seller messaging and notifications."""

__version__ = '1.0.0'
