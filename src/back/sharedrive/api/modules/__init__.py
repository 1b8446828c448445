"""Feature modules for sharedrive API."""
