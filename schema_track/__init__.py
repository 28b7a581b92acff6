"""Track relational schema snapshots, diffs and changelogs."""

__version__ = "0.1.0"
