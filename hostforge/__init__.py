"""HostForge command-line entry points."""
