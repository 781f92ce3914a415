"""Command line interface (``balance-forge``)."""
