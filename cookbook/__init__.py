"""Social graph and review aggregation core for a recipe-sharing platform."""

__version__ = "1.0.0"
