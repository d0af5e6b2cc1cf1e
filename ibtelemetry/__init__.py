"""Read and write .ibt racing telemetry files and query their YAML session info."""

__version__ = "0.1.0"
__all__ = ["carnum", "defines", "reader", "writer", "yaml_path"]