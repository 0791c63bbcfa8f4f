"""Core decision logic for signal evaluation and report rendering.

This package contains pure business logic with no I/O dependencies
(no network, no clock, no environment access). Everything here is
safe to call from both the scheduled cycle and the command poll loop.
"""
