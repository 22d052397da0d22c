"""Duty rostering: place workers on duty posts across one workday.

Modules:
- config: load and validate configuration (YAML or JSON)
- data_io: pandas CSV readers and writers
- domain: dataclass records (presets, workers, skills, placements)
- services: exclusions, breaks, hard constraints, candidate selection, timeline
- engine: shared-grid and per-post schedulers, gap repair, orchestrator
- validator: post-generation checks and summaries
- cli: command-line interface entrypoints
"""

__all__ = [
    "config",
    "data_io",
    "domain",
    "services",
    "engine",
    "validator",
    "cli",
]
