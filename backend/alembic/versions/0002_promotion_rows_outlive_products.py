"""keep promotion rows when their product is deleted

Revision ID: 0002_promotion_product_set_null
Revises: 0001_initial
Create Date: 2026-10-19 15:00:00.000000

"""
from typing import Sequence, Union

from alembic import op


revision: str = '0002_promotion_product_set_null'
down_revision: Union[str, None] = '0001_initial'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TABLES = ('featured_products', 'hot_deals')


def upgrade() -> None:
    # MySQL: the unnamed product_id FK from 0001 is <table>_ibfk_1
    for table in TABLES:
        op.execute(f"ALTER TABLE {table} DROP FOREIGN KEY {table}_ibfk_1")
        op.execute(f"ALTER TABLE {table} MODIFY COLUMN product_id INT NULL")
        op.execute(f"""
            ALTER TABLE {table} ADD CONSTRAINT {table}_ibfk_1
            FOREIGN KEY (product_id) REFERENCES products (id) ON DELETE SET NULL
        """)


def downgrade() -> None:
    for table in TABLES:
        op.execute(f"DELETE FROM {table} WHERE product_id IS NULL")
        op.execute(f"ALTER TABLE {table} DROP FOREIGN KEY {table}_ibfk_1")
        op.execute(f"ALTER TABLE {table} MODIFY COLUMN product_id INT NOT NULL")
        op.execute(f"""
            ALTER TABLE {table} ADD CONSTRAINT {table}_ibfk_1
            FOREIGN KEY (product_id) REFERENCES products (id) ON DELETE CASCADE
        """)
