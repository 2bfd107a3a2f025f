"""Presentation bridge for promptly.

Exposes the overlay session to the overlay window over local HTTP.
"""
