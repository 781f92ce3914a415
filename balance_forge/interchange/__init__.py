"""CSV and pandas adapters for balance tables."""
