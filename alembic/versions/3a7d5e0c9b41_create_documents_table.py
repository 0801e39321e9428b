"""Create documents table"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '3a7d5e0c9b41'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # One row per stored resource; the body is JSON text
    op.create_table(
        'documents',
        sa.Column('collection', sa.String(50), nullable=False),
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('data', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('collection', 'id')
    )
    op.create_index(op.f('ix_documents_collection'), 'documents', ['collection'])


def downgrade():
    op.drop_index(op.f('ix_documents_collection'), table_name='documents')
    op.drop_table('documents')
