"""Integrations and business flows used by the routes."""
