"""Core domain logic for RR-interval heart monitoring.

This package contains the monitor state machine, buffers, event log and export,
isolated from presentation so it can be driven by a timer or a scripted clock.
"""
