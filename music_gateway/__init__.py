# ABOUTME: Music generation gateway package
# ABOUTME: HTTP front end for Vertex AI music models with pacing, retry, and a single-flight gate

__version__ = "1.0.0"
