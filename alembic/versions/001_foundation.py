"""
============================================================
TARJETA CRC (Class / Responsibilities / Collaborators)
============================================================
Class: 001_foundation (Alembic Migration)

Responsibilities:
  - Crear el esquema base: users (identidad) y properties.
  - Definir constraints e índices que los repositorios asumen.

Collaborators:
  - PostgreSQL 14+
  - Alembic (framework de migraciones)
  - infrastructure/repositories/postgres/* (usan este esquema como contrato)

Policy:
  - Migración BASELINE. Downgrade NO soportado.
  - Los ids son TEXT (UUID serializado); los repositorios convierten.
  - Convención de nombres:
      pk_<tabla>                         - Primary keys
      uq_<tabla>_<col>                   - Unique constraints
      ix_<tabla>_<col>                   - Indexes
      fk_<tabla>_<col>__<ref_tabla>      - Foreign keys
  - PostgresUserRepository distingue `pk_users` de `uq_users_email` al
    traducir UniqueViolation: no renombrar sin actualizarlo.
============================================================
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_foundation"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    # =========================================================
    # 1) IDENTITY (users)
    # =========================================================
    op.create_table(
        "users",
        sa.Column("id", sa.Text, nullable=False),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("email", sa.Text, nullable=False),
        sa.Column("password_hash", sa.Text, nullable=False),
        sa.Column(
            "roles",
            postgresql.ARRAY(sa.Text),
            nullable=False,
            server_default=sa.text("ARRAY[]::text[]"),
        ),
        sa.Column("department", sa.Text, nullable=True),
        sa.Column(
            "enabled",
            sa.Boolean,
            nullable=False,
            server_default=sa.text("true"),
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    # =========================================================
    # 2) PROPERTIES
    # =========================================================
    op.create_table(
        "properties",
        sa.Column("id", sa.Text, nullable=False),
        sa.Column("manager_id", sa.Text, nullable=False),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("address_level_1_id", sa.Text, nullable=False),
        sa.Column("address_level_2_id", sa.Text, nullable=False),
        sa.Column("address_level_3_id", sa.Text, nullable=False),
        sa.Column("street", sa.Text, nullable=False),
        sa.Column(
            "status",
            sa.Text,
            nullable=False,
            server_default=sa.text("'ACTIVE'"),
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_properties"),
        sa.ForeignKeyConstraint(
            ["manager_id"],
            ["users.id"],
            name="fk_properties_manager_id__users",
            ondelete="CASCADE",
        ),
        sa.CheckConstraint(
            "status IN ('ACTIVE', 'INACTIVE')",
            name="ck_properties_status",
        ),
    )

    # query_by_manager_id filtra y ordena por (manager_id, created_at, id).
    op.create_index(
        "ix_properties_manager_id",
        "properties",
        ["manager_id", "created_at", "id"],
    )


def downgrade() -> None:
    """Downgrade NO soportado para la migración fundacional."""
    raise NotImplementedError(
        "Baseline: downgrade no soportado por política. "
        "Para resetear la base de datos, recrear el schema y volver a migrar."
    )
