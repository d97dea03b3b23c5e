"""Application layer: interfaces, DTOs, services, use cases.

Depends only on domain and protocol definitions. Infrastructure
implements the interfaces (storage backends, counter store).
"""
