"""initial schema

Revision ID: 5e2a91c07d4b
Revises:
Create Date: 2026-10-19 09:12:40.118204

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "5e2a91c07d4b"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Create destinations, price cache, bookings and profile tables."""

    # -- destinations --
    op.create_table(
        "destinations",
        sa.Column("code", sa.String(3), primary_key=True),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("country", sa.String(100), nullable=False, server_default=""),
        sa.Column("country_code", sa.String(2)),
        sa.Column(
            "carriers",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column("last_price", sa.Numeric(10, 2)),
        sa.Column("currency", sa.String(3), nullable=False, server_default="EUR"),
        sa.Column("last_synced_at", sa.DateTime(timezone=True)),
        *_timestamps(),
    )
    op.create_index("ix_destinations_country_code", "destinations", ["country_code"])

    # -- flight_prices --
    op.create_table(
        "flight_prices",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "destination_code",
            sa.String(3),
            sa.ForeignKey("destinations.code", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("departure_date", sa.Date(), nullable=False),
        sa.Column("return_date", sa.Date(), nullable=False),
        sa.Column(
            "weekend_type",
            sa.Enum("thu-sun", "fri-sun", "fri-mon", name="weekendtype"),
            nullable=False,
        ),
        sa.Column("price", sa.Numeric(10, 2)),
        sa.Column("currency", sa.String(3), nullable=False, server_default="EUR"),
        sa.Column(
            "carriers",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column("flight_data", postgresql.JSONB()),
        sa.Column(
            "last_updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint(
            "destination_code",
            "departure_date",
            "return_date",
            name="uq_flight_prices_destination_dates",
        ),
        sa.CheckConstraint("price >= 0", name="ck_flight_prices_price_non_negative"),
    )
    op.create_index(
        "ix_flight_prices_last_updated_at", "flight_prices", ["last_updated_at"]
    )
    op.create_index(
        "ix_flight_prices_dates", "flight_prices", ["departure_date", "return_date"]
    )

    # -- flight_bookings --
    op.create_table(
        "flight_bookings",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("order_id", sa.String(100), nullable=False),
        sa.Column("booking_reference", sa.String(20), nullable=False),
        sa.Column("flight_offer_id", sa.String(50)),
        sa.Column("flight_data", postgresql.JSONB()),
        sa.Column("encrypted_traveler_name", sa.Text()),
        sa.Column("encrypted_email", sa.Text()),
        sa.Column("encrypted_phone", sa.Text()),
        sa.Column("total_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="EUR"),
        sa.Column(
            "status",
            sa.Enum("confirmed", "pending_sandbox", name="bookingstatus"),
            nullable=False,
        ),
        sa.Column(
            "booked_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        *_timestamps(),
    )
    op.create_index("ix_flight_bookings_user_id", "flight_bookings", ["user_id"])
    op.create_index("ix_flight_bookings_order_id", "flight_bookings", ["order_id"])

    # -- profiles --
    op.create_table(
        "profiles",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(255)),
        sa.Column("display_name", sa.String(255)),
        sa.Column("home_airport", sa.String(3), nullable=False, server_default="AMS"),
        *_timestamps(),
    )

    # -- user_preferences --
    op.create_table(
        "user_preferences",
        sa.Column("user_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("max_price", sa.Integer()),
        sa.Column("preferred_weekend_types", postgresql.JSONB()),
        sa.Column("preferred_carriers", postgresql.JSONB()),
        sa.Column(
            "non_stop_only", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        *_timestamps(),
    )


def downgrade() -> None:
    """Drop every table and enum created by upgrade()."""
    op.drop_table("user_preferences")
    op.drop_table("profiles")
    op.drop_index("ix_flight_bookings_order_id", table_name="flight_bookings")
    op.drop_index("ix_flight_bookings_user_id", table_name="flight_bookings")
    op.drop_table("flight_bookings")
    op.drop_index("ix_flight_prices_dates", table_name="flight_prices")
    op.drop_index("ix_flight_prices_last_updated_at", table_name="flight_prices")
    op.drop_table("flight_prices")
    op.drop_index("ix_destinations_country_code", table_name="destinations")
    op.drop_table("destinations")
    sa.Enum(name="bookingstatus").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="weekendtype").drop(op.get_bind(), checkfirst=True)
