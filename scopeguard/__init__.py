"""scopeguard - scoped blocklist moderation and configuration inheritance API."""
