"""sharedrive: self-hosted file manager with time-limited share links."""

__version__ = '0.1.0'
