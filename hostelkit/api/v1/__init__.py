"""Versioned HTTP endpoints."""
