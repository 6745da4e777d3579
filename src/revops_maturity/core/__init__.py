"""Core domain: scoring, benchmarks, models and services."""
