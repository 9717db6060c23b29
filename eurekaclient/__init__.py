"""Client for the Eureka service registry: cluster requests with retries, registry operations and data models."""

__version__ = "0.1.0"