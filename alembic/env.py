from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool, create_engine

from app.core.config import settings
from app.db.session import Base

# Every table must be imported for autogenerate to see it
from app.models.user import User  # noqa: F401
from app.models.adventure import Adventure, AdventureDate  # noqa: F401
from app.models.adventure_category import AdventureCategory  # noqa: F401
from app.models.coupon import Coupon  # noqa: F401
from app.models.payment_intent import PaymentIntent  # noqa: F401
from app.models.booking import Booking  # noqa: F401
from app.models.order import Order  # noqa: F401
from app.models.voucher_purchase import VoucherPurchase  # noqa: F401
from app.models.audit_log import AuditLog  # noqa: F401

config = context.config

# alembic.ini only holds a placeholder; the app settings own the URL
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata

# SQLite cannot ALTER most things in place
RENDER_AS_BATCH = settings.DATABASE_URL.startswith("sqlite")


def run_migrations_offline() -> None:
    context.configure(
        url=settings.DATABASE_URL,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        render_as_batch=RENDER_AS_BATCH,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(settings.DATABASE_URL, poolclass=pool.NullPool)
    with engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=RENDER_AS_BATCH,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
