"""Find and download media from video, picture and audio sites."""

__version__ = "0.9.8"