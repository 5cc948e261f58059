"""Unified worker runner for the Bridge scheduling components.

Each deployed service runs the same image with a different component name to
select which workflows/activities to expose on that worker.
"""
