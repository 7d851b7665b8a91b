"""Chat bot building blocks: input and output messages, configuration locks, cron-style task scheduling and a Gitter adapter."""

__version__ = "4.0.0"