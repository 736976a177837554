"""Small service stack: a database sync job, an HTTP API and a heartbeat."""
