"""Application layer: DTOs, repository ports, services and use cases."""
