"""Per-user, per-channel opt-in preferences."""
