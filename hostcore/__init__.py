# ============================================================================
# hostcore/__init__.py
# HostForge engine package
# ============================================================================
#
# SUBPACKAGES:
# - base:      configuration and the immutable RunContext
# - observer:  the Decision Log (entries, sinks, journal)
# - executor:  privilege gate, safety checkpoint, result models
# - modules:   audit / repair / update / harden
# - engine:    the Orchestrator state machine
# - toolkit:   collaborator interfaces and Windows implementations
# - reporting: JSON run report
#
# ============================================================================

__version__ = "0.1.0"
