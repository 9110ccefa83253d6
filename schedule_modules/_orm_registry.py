"""
Module ORM Registry (``schedule_modules._orm_registry``).

Ensures every module-level SQLAlchemy ORM model is imported so that
``Base.metadata`` contains its table definition before
``schedule_kernel.db.engine.create_tables()`` runs.
"""


def import_all_orm_models() -> None:
    """Import every ``schedule_modules.*.orm`` module.  Idempotent."""
    import schedule_modules.project.orm  # noqa: F401
