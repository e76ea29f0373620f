import logging
import sys
from pathlib import Path
from logging.config import fileConfig
from urllib.parse import urlparse, urlunparse, parse_qsl, urlencode

from alembic import context
from sqlalchemy import engine_from_config, pool

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.append(str(PROJECT_ROOT))

from app.core.config import get_settings
from app.db.base import Base
import app.db.models  # noqa: F401  (populates Base.metadata)

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)
log = logging.getLogger("alembic.env")


def _psycopg2_url(url: str) -> str:
    """Supabase hands out postgres:// URLs; migrations need psycopg2 over TLS."""
    if not url.startswith(("postgresql://", "postgres://")):
        return url
    url = "postgresql+psycopg2://" + url.split("://", 1)[1]
    parsed = urlparse(url)
    query = dict(parse_qsl(parsed.query, keep_blank_values=True))
    query.setdefault("sslmode", "require")
    return urlunparse(parsed._replace(query=urlencode(query)))


def _masked(url: str) -> str:
    parsed = urlparse(url)
    if not parsed.password:
        return url
    return url.replace(f":{parsed.password}@", ":***@", 1)


DB_URL = _psycopg2_url(get_settings().get_database_url() or "")
if not DB_URL:
    raise RuntimeError("DATABASE_URL is not configured; cannot run migrations.")
config.set_main_option("sqlalchemy.url", DB_URL.replace("%", "%%"))
log.info("migrating %s", _masked(DB_URL))

target_metadata = Base.metadata
JUDGING_TABLES = set(target_metadata.tables)


def include_object(object, name, type_, reflected, compare_to):
    # Supabase owns auth.* and whatever else lives in public; only diff our tables
    if type_ == "table":
        return name in JUDGING_TABLES
    return True


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        include_object=include_object,
        **kwargs,
    )


def run_migrations_offline() -> None:
    _configure(url=DB_URL, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with engine.connect() as connection:
        _configure(connection=connection, render_as_batch=True)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
