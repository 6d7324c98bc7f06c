"""Command-line tools for ByteScore."""
