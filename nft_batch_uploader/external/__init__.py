"""External service clients used by the uploader."""
