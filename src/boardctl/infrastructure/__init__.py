"""Infrastructure layer — persistence and the ordered card store."""
