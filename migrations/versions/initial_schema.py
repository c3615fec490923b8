"""Initial schema: users, verification tokens, centers, games, copies, rentals.

Revision ID: initial_schema
Revises:
Create Date: 2026-10-17
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=254), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('google_id', sa.String(length=255), nullable=True),
        sa.Column('name', sa.String(length=100), nullable=True),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('roles', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('email_verified', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_google_id'), 'users', ['google_id'], unique=True)

    op.create_table('verification_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('identifier', sa.String(length=254), nullable=False),
        sa.Column('token', sa.String(length=100), nullable=False),
        sa.Column('expires', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_verification_tokens_identifier'), 'verification_tokens', ['identifier'], unique=False)
    op.create_index(op.f('ix_verification_tokens_token'), 'verification_tokens', ['token'], unique=True)

    op.create_table('centers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('city', sa.String(length=50), nullable=False),
        sa.Column('area', sa.String(length=20), nullable=False),
        sa.Column('coordinator_id', sa.Integer(), nullable=True),
        sa.Column('super_coordinator_id', sa.Integer(), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['coordinator_id'], ['users.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['super_coordinator_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_centers_name'), 'centers', ['name'], unique=False)
    op.create_index(op.f('ix_centers_area'), 'centers', ['area'], unique=False)
    op.create_index(op.f('ix_centers_coordinator_id'), 'centers', ['coordinator_id'], unique=False)
    op.create_index(op.f('ix_centers_super_coordinator_id'), 'centers', ['super_coordinator_id'], unique=False)

    op.create_table('games',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=30), nullable=False),
        sa.Column('target_audience', sa.String(length=20), nullable=False),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_games_name'), 'games', ['name'], unique=False)
    op.create_index(op.f('ix_games_category'), 'games', ['category'], unique=False)
    op.create_index(op.f('ix_games_created_at'), 'games', ['created_at'], unique=False)

    op.create_table('game_instances',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('game_id', sa.Integer(), nullable=False),
        sa.Column('center_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('expected_return_date', sa.DateTime(), nullable=True),
        sa.Column('notes', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['center_id'], ['centers.id'], ),
        sa.ForeignKeyConstraint(['game_id'], ['games.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_game_instances_game_id'), 'game_instances', ['game_id'], unique=False)
    op.create_index(op.f('ix_game_instances_center_id'), 'game_instances', ['center_id'], unique=False)
    op.create_index(op.f('ix_game_instances_status'), 'game_instances', ['status'], unique=False)

    op.create_table('rentals',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('center_id', sa.Integer(), nullable=False),
        sa.Column('game_instance_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('request_date', sa.DateTime(), nullable=False),
        sa.Column('borrow_date', sa.DateTime(), nullable=True),
        sa.Column('return_date', sa.DateTime(), nullable=True),
        sa.Column('expected_return_date', sa.DateTime(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['center_id'], ['centers.id'], ),
        sa.ForeignKeyConstraint(['game_instance_id'], ['game_instances.id'], ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_rentals_user_id'), 'rentals', ['user_id'], unique=False)
    op.create_index(op.f('ix_rentals_center_id'), 'rentals', ['center_id'], unique=False)
    op.create_index(op.f('ix_rentals_game_instance_id'), 'rentals', ['game_instance_id'], unique=False)
    op.create_index(op.f('ix_rentals_status'), 'rentals', ['status'], unique=False)
    op.create_index(op.f('ix_rentals_created_at'), 'rentals', ['created_at'], unique=False)


def downgrade():
    op.drop_table('rentals')
    op.drop_table('game_instances')
    op.drop_table('games')
    op.drop_table('centers')
    op.drop_table('verification_tokens')
    op.drop_table('users')
