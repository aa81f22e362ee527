"""HTTP routes. Application endpoints are versioned under `v1/`."""
