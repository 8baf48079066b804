"""Core log interpretation: buffer, autoscroll, classifier, ingest, session."""
