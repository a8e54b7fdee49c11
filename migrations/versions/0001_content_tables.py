"""Create users, posts and cases tables

Revision ID: 0001_content_tables
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_content_tables'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('public_id', sa.String(length=36), nullable=False),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.Column('failed_login_attempts', sa.Integer(), nullable=False),
        sa.Column('login_locked_until', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_users_public_id', 'users', ['public_id'], unique=True)
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table(
        'posts',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('excerpt', sa.Text(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('category', sa.String(length=40), nullable=False),
        sa.Column('author', sa.String(length=120), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('read_time', sa.String(length=40), nullable=False),
        sa.Column('image_url', sa.String(length=500), nullable=False),
        sa.Column('featured', sa.Boolean(), nullable=False),
        # Rows from before the draft workflow have no status; read as draft
        sa.Column('status', sa.String(length=16), nullable=True),
    )
    op.create_index('ix_posts_date', 'posts', ['date'])

    op.create_table(
        'cases',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('slug', sa.String(length=220), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('challenge', sa.Text(), nullable=False),
        sa.Column('solution', sa.Text(), nullable=False),
        sa.Column('results', sa.Text(), nullable=False),
        sa.Column('client_name', sa.String(length=200), nullable=False),
        sa.Column('client_industry', sa.String(length=40), nullable=False),
        sa.Column('client_size', sa.String(length=40), nullable=False),
        sa.Column('client_testimonial', sa.Text(), nullable=True),
        sa.Column('client_role', sa.String(length=200), nullable=True),
        sa.Column('duration', sa.String(length=80), nullable=False),
        sa.Column('image_url', sa.String(length=500), nullable=False),
        sa.Column('featured', sa.Boolean(), nullable=False),
        sa.Column('tools', sa.JSON(), nullable=False),
        sa.Column('metrics', sa.JSON(), nullable=False),
        sa.Column('gallery', sa.JSON(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=True),
    )
    op.create_index('ix_cases_slug', 'cases', ['slug'], unique=True)
    op.create_index('ix_cases_created_at', 'cases', ['created_at'])


def downgrade():
    op.drop_index('ix_cases_created_at', table_name='cases')
    op.drop_index('ix_cases_slug', table_name='cases')
    op.drop_table('cases')
    op.drop_index('ix_posts_date', table_name='posts')
    op.drop_table('posts')
    op.drop_index('ix_users_username', table_name='users')
    op.drop_index('ix_users_public_id', table_name='users')
    op.drop_table('users')
