"""Notification ingestion, status tracking and delivery channels."""
