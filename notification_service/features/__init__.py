"""Feature packages: notifications (ingestion, channels) and preferences."""
