"""Command-line interface for name-attestation."""
