"""signon: sign-in with Google One Tap, Google and GitHub."""

__version__ = "0.1.0"
