"""
Schedule Modules.

Thin orchestration layers over the Schedule Kernel and Engines.
Each module contains:
- Domain models (the nouns)
- ORM persistence models (the record store)
- Workflows (status lifecycles)
- Configuration
- A service facade owning the session, clock and transaction boundary

Modules:
- Project: projects, milestones, tasks, dependencies, weather delays,
  resource allocations; CPM, percent complete, EVM, look-ahead,
  schedule variance, delay impact, resource loading.

Actual processing logic lives in the engines.
"""
