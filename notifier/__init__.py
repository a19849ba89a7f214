"""Background worker that turns queued notification events into emails."""
