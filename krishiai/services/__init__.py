"""Feature services behind the KrishiAi+ API."""
