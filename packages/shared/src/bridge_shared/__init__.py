"""Shared infrastructure for the Bridge scheduling platform.

Provides the Temporal client connection factory, the Redis adapter, task queue
constants, the error taxonomy, and the Pydantic boundary models used across
all components.
"""
