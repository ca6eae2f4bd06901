"""
Bigtable Service Broker

An Open Service Broker plugin that provisions and deprovisions
Google Cloud Bigtable instances.
"""

__version__ = "0.1.0"
