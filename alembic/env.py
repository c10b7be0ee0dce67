"""
Alembic Environment Configuration

Migrations for the review aggregation tables.

The engine shares its database with the legacy catalog: `features` and the
rest of the catalog schema belong to the catalog. Autogenerate therefore
only compares tables that are declared on Base.metadata, and never proposes
dropping catalog tables it does not know about.

WORKFLOW:
1. Change the models in bittermelon/models/
2. alembic revision --autogenerate -m "description"
3. Review the generated file in alembic/versions/
4. alembic upgrade head

The database URL comes from DATABASE_URL (bittermelon.config), not from
alembic.ini.
"""

from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool

from alembic import context

from bittermelon.config import get_settings
from bittermelon.database import Base
from bittermelon import models  # noqa: F401 - registers tables on Base.metadata

settings = get_settings()

config = context.config
config.set_main_option("sqlalchemy.url", settings.database_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def include_object(object, name, type_, reflected, compare_to):
    """Skip reflected catalog tables that the engine does not model."""
    if type_ == "table" and reflected and compare_to is None:
        return False
    return True


def run_migrations_offline() -> None:
    """
    Emit SQL instead of connecting.

    Usage:
        alembic upgrade head --sql > migration.sql
    """
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        include_object=include_object,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply migrations over a dedicated, unpooled connection."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            include_object=include_object,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
