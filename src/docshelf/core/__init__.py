"""Core site model, rendering and publishing."""
