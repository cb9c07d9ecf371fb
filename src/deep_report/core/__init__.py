"""Core building blocks: errors, concurrency, providers and research workflows."""
