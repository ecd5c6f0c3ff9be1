"""SaunaFlow: guided heat/cold/rest rituals."""

__version__ = "0.1.0"
