"""Business operations used by the route handlers."""
