"""Remote-play HTTP and WebSocket surface."""
