"""Crypto Sentinel: weekly DCA advice delivered over Telegram."""

__version__ = "0.1.0"
