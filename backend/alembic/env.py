from logging.config import fileConfig
from alembic import context
from dotenv import load_dotenv
import os
import time

# Load local env if it exists, otherwise use system env vars
if os.path.exists(".env.local"):
    load_dotenv(".env.local")
else:
    load_dotenv()

# Import our models so every table is registered on the metadata
from models import Base
from config.env import Settings
from database import create_db_engine

config = context.config

database_url = Settings().database_url
config.set_main_option("sqlalchemy.url", database_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

def get_next_revision_id():
    """Generate a sequential revision ID based on timestamp."""
    # Use millisecond timestamp for uniqueness
    return str(int(time.time() * 1000))

def process_revision_directives(context, revision, directives):
    """Override revision ID generation with a timestamp."""
    script = directives[0]
    script.rev_id = get_next_revision_id()

def run_migrations_offline() -> None:
    context.configure(
        url=database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=database_url.startswith("sqlite"),
        process_revision_directives=process_revision_directives
    )

    with context.begin_transaction():
        context.run_migrations()

def run_migrations_online() -> None:
    connectable = create_db_engine(database_url)

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=database_url.startswith("sqlite"),
            process_revision_directives=process_revision_directives
        )

        with context.begin_transaction():
            context.run_migrations()

    connectable.dispose()

if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
