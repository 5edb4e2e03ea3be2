"""fontshelf - upload, subset, release and serve self-hosted web fonts."""

__version__ = "0.1.0"
