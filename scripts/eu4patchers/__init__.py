"""Signature-anchored patchers for the Europa Universalis IV executable."""
