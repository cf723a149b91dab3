"""Article and settings use cases behind the HTTP API."""
