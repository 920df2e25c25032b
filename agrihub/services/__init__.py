"""Aggregation services: farms, marketplace, portfolio, wallet."""
