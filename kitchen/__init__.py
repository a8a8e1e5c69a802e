"""Cloud kitchen order dashboard."""
