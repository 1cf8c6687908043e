"""PhishScan - rule-driven phishing message scanner."""

__version__ = "0.1.0"
