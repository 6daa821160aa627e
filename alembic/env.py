"""
Alembic environment — migrates the database app.database.engine points at.
"""
import importlib
from logging.config import fileConfig

from alembic import context

from app.database import Base, engine

if context.config.config_file_name is not None:
    fileConfig(context.config.config_file_name)

for module in ('feedback', 'analytics_snapshot', 'live_poll', 'networking_profile', 'raffle'):
    importlib.import_module(f'app.models.{module}')

target_metadata = Base.metadata


def run_migrations_offline():
    context.configure(
        url=engine.url.render_as_string(hide_password=False),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={'paramstyle': 'named'},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
