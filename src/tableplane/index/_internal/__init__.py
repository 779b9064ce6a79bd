"""Internal index implementations."""
