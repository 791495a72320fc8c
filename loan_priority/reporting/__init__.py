"""
loan_priority.reporting — terminal formatting and file export of rankings.

Modules:
  formatters — ASCII terminal table formatters for Typer CLI commands.
  export     — ranking row adapter + CSV/JSON flat-file export helpers.
"""
