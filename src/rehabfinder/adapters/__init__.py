"""Adapters binding the domain ports to Google Maps Platform and SQLAlchemy."""
