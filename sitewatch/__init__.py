"""sitewatch — periodic website availability monitor with email alerts."""

__version__ = "0.1.0"
