"""Building blocks for an MJPEG-over-HTTP streamer: paths, MIME types, static files, sockets, workers and options."""

__version__ = "0.1.0"