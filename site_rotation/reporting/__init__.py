"""
Reporting surfaces over the engine: snapshots, terminal formatting, export.

Modules:
  snapshot   — build_snapshot(): every engine output from one consistent read.
  formatters — ASCII terminal formatters for Typer CLI commands.
  export     — CSV/JSON/Parquet flat-file export helpers.
"""
