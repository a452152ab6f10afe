"""
City discovery module.

Combines the provider collectors into a single city profile.
"""

from tripcache.discovery.service import CityDiscovery, open_discovery

__all__ = ["CityDiscovery", "open_discovery"]
