"""Ready-made machines built on the kernel."""
