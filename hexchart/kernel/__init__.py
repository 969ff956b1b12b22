"""Kernel: definitions, the transition engine, the interpreter service and
their supporting infrastructure (exceptions, logging, configuration)."""
