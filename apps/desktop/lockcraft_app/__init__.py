"""LockCraft command-line app."""
