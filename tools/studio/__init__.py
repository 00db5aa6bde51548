"""tools/studio — Studio DSL tools (translation only, no DAW I/O)."""
