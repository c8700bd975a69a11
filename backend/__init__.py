"""ThinkBright Web Solutions site backend."""
