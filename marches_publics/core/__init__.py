"""
CORE LAYER CONTRACT

This package contains core application components and abstractions.

RULES:
- Contains fundamental building blocks for all layers
- Defines domain models, interfaces and storage backends
- No business logic implementation (merge, filter, validation live in services)

LAYER RESPONSIBILITY:
- Domain entities (ContractRecord, Document, Note)
- Storage backend abstractions and implementations
- Service interfaces and contracts
- Process wiring (DependencyContainer)

CROSS-LAYER RESTRICTIONS:
- models, interfaces and storage import nothing from services
- Only dependency_injection knows concrete services

If you need business rules, you are in the wrong layer.
"""
