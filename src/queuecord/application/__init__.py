"""
Application Layer

Orchestrates domain objects and infrastructure adapters.

Structure:
- services/: The queue engine and the per-guild engine registry
- interfaces/: Port interfaces for infrastructure adapters
"""
