"""HTTP adapter over the service layer."""
