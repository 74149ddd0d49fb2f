"""
Shared utilities: configuration, logging, clock, dates and wiring.
"""
