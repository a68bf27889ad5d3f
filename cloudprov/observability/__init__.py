"""Logging and metrics for cloudprov."""
