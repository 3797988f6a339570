"""SEO Monitor: rule-based audits, scoring and regression detection."""

__version__ = "0.1.0"
