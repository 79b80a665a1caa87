"""PRBuild: AI-drafted, panel-reviewed press releases."""

__version__ = "1.0.0"
