"""Dream Relay: CORS-aware proxy in front of the Replicate predictions API."""
