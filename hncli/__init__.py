"""
Hacker News command-line client.

This package separates parsing (HackerNewsScraper), I/O (AsyncDriver) and
the rank cache (CacheStore). The ``hn`` console script in ``hncli.cli``
wires them together.
"""
