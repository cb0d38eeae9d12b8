"""ballotbox - single-election vote accounting with one-level delegation."""

__version__ = "0.1.0"
