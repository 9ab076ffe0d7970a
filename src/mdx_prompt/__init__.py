"""Turn MDX documentation fragments into one plain-Markdown prompt file."""

__version__ = "0.1.0"
