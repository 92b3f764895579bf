"""jsgraph-cli: call-dependency and module-graph analysis for JS/TS sources."""

__version__ = "0.1.0"
