"""Route modules for the Campus Pulse API."""
