"""xcreport - Xcode result bundle to markdown report converter."""

__version__ = "0.1.0"
