"""Research workflows, models and search/page providers."""
