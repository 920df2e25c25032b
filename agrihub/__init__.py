"""Agrihub: read-mostly aggregation backend for the farm monitoring mobile client."""
