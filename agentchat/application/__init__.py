"""Application layer - services and pipelines."""
