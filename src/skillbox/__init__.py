"""skillbox: discover agent skills and run their scripts under policy."""

__version__ = "0.1.0"
