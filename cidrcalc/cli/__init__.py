"""Command line entry points for cidrcalc."""
