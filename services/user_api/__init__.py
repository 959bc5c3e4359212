"""User API Service.

This service combines:
- Auth: JWT issuance and validation
- Users: token-protected CRUD and search over the user store
- Metrics: Prometheus counters, gauges and histograms for every request
"""

__version__ = "1.0.0"
