# Services package init
"""
Blog API Backend — Services Layer
==================================

What:  Business logic layer sitting between routes (HTTP) and the
       persistence gateway (blogapi.repository).
Why:   Separation of concerns — routes handle HTTP, services handle business rules.
How:   Services receive the request's AsyncSession, describe queries as
       QuerySpecs, and return response schemas (never ORM rows).

Service Inventory:
    - QueryService:    reads (lookups, pagination, search, statistics)
    - MutationService: writes (parent checks, email uniqueness, hashing)

Why services are separate from routes:
    1. Testability: Services can be unit-tested without HTTP overhead
    2. Reusability: The credential verifier reuses QueryService lookups
    3. Single responsibility: Routes handle HTTP; services handle logic
"""
