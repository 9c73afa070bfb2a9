"""Platform integration package."""
