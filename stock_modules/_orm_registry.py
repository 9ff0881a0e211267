"""
Module ORM Registry (``stock_modules._orm_registry``).

Ensures every module-level SQLAlchemy ORM model is imported so that
``Base.metadata`` contains its table definitions before tables are created.
``stock_kernel.db.engine.create_tables()`` calls ``import_all_orm_models()``.
"""


def import_all_orm_models() -> None:
    """Import every ``stock_modules.*.orm`` module (idempotent)."""
    # fmt: off
    import stock_modules.inventory.orm  # noqa: F401
    import stock_modules.purchasing.orm  # noqa: F401
    # fmt: on
