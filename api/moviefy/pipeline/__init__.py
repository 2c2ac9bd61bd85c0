"""Multi-source aggregation and link resolution for catalog views."""
