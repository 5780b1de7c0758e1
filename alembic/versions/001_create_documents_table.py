"""Create documents table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `documents` table behind SqlDocumentStore.
Why:   Holds every collection (notes, products, users) as
       (collection, doc_id) → JSON field map, mirroring Firestore paths.

Rollback: downgrade() drops the table and every stored record.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "documents",
        sa.Column(
            "collection",
            sa.String(128),
            nullable=False,
            comment="Collection name, e.g. notes, products, users",
        ),
        sa.Column(
            "doc_id",
            sa.String(128),
            nullable=False,
            comment="Document id, unique within its collection",
        ),
        sa.Column(
            "data",
            sa.JSON(),
            nullable=False,
            comment="Flat field/value map",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("collection", "doc_id"),
    )

    # Listing a collection reads it in insertion order
    op.create_index(
        "idx_documents_collection_created",
        "documents",
        ["collection", "created_at"],
    )


def downgrade() -> None:
    op.drop_index("idx_documents_collection_created", table_name="documents")
    op.drop_table("documents")
