"""Command-line tools: the user reconciler CLI and audit log verification."""
