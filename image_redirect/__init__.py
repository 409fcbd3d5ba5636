"""Image redirect service: device category + id -> 301 to an upstream image URL."""
