"""Routing — rule declaration, compilation, admission and dispatch.

Rules are declared during setup, compiled lazily on their first match
attempt, and evaluated against requests to produce dispatch decisions.
"""
