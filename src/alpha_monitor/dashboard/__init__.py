"""Optional web dashboard -- JSON API and WebSocket push of monitoring results."""
