"""
Interface implementations for different user interfaces and loggers.

This module contains concrete implementations of the ChatUserInterface
and ChatLogger protocols (Rich console, standard-library logging).
"""
