"""create_review_aggregation_tables

Revision ID: 3f1c2a9b7d10
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9b7d10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


recommendation = sa.Enum('UP', 'DOWN', name='recommendation')
certification = sa.Enum('HoneyDew', 'HoneyDont', name='certification')


def _has_table(name: str) -> bool:
    if op.get_context().as_sql:
        return False
    return sa.inspect(op.get_bind()).has_table(name)


def upgrade() -> None:
    # The catalog normally owns `features`; create it only on an empty database
    if not _has_table('features'):
        op.create_table(
            'features',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('title', sa.String(length=255), nullable=False),
            sa.Column('year', sa.Integer(), nullable=False),
            sa.Column('type', sa.String(length=255), nullable=False),
            sa.PrimaryKeyConstraint('id'),
        )

    op.create_table(
        'rating_scales',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('description', sa.String(length=80), nullable=False,
                  comment="Human readable scheme name, e.g. 'Five-star'"),
        sa.Column('positive_threshold', sa.Numeric(precision=5, scale=2), nullable=False,
                  comment='Scores at or above this value are classified UP'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('description'),
    )

    op.create_table(
        'outlets',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False, comment='Publication name'),
        sa.Column('country', sa.String(length=80), nullable=True),
        sa.Column('url', sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_outlets_name'), 'outlets', ['name'], unique=True)

    op.create_table(
        'critics',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('display_name', sa.String(length=120), nullable=False),
        sa.Column('outlet_id', sa.Integer(), nullable=False),
        sa.Column('is_top_critic', sa.Boolean(), nullable=False),
        sa.Column('joined_date', sa.Date(), nullable=False),
        sa.ForeignKeyConstraint(['outlet_id'], ['outlets.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_critics_outlet_id'), 'critics', ['outlet_id'], unique=False)

    op.create_table(
        'reviews',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('feature_id', sa.Integer(), nullable=False),
        sa.Column('critic_id', sa.Integer(), nullable=False),
        sa.Column('scale_id', sa.Integer(), nullable=False),
        sa.Column('numeric_score', sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column('recommendation', recommendation, nullable=False,
                  comment="Derived from numeric_score and the scale's positive_threshold"),
        sa.Column('review_date', sa.Date(), nullable=False),
        sa.Column('url', sa.String(length=255), nullable=True),
        sa.CheckConstraint('numeric_score >= 0', name='ck_review_score_non_negative'),
        sa.ForeignKeyConstraint(['critic_id'], ['critics.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['feature_id'], ['features.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['scale_id'], ['rating_scales.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('critic_id', 'feature_id', name='uq_review_critic_feature'),
    )
    op.create_index(op.f('ix_reviews_critic_id'), 'reviews', ['critic_id'], unique=False)
    op.create_index(op.f('ix_reviews_feature_id'), 'reviews', ['feature_id'], unique=False)
    op.create_index(op.f('ix_reviews_scale_id'), 'reviews', ['scale_id'], unique=False)

    op.create_table(
        'title_stats',
        sa.Column('feature_id', sa.Integer(), nullable=False),
        sa.Column('total_reviews', sa.Integer(), nullable=False),
        sa.Column('positive_reviews', sa.Integer(), nullable=False),
        sa.Column('sweetness_pct', sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column('certification', certification, nullable=True),
        sa.CheckConstraint('sweetness_pct >= 0 AND sweetness_pct <= 100',
                           name='ck_title_stats_sweetness_range'),
        sa.ForeignKeyConstraint(['feature_id'], ['features.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('feature_id'),
    )

    op.create_table(
        'critic_stats',
        sa.Column('critic_id', sa.Integer(), nullable=False),
        sa.Column('review_count', sa.Integer(), nullable=False),
        sa.Column('sweetness_pct', sa.Numeric(precision=5, scale=2), nullable=False),
        sa.ForeignKeyConstraint(['critic_id'], ['critics.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('critic_id'),
    )

    op.create_table(
        'outlet_stats',
        sa.Column('outlet_id', sa.Integer(), nullable=False),
        sa.Column('review_count', sa.Integer(), nullable=False),
        sa.Column('sweetness_pct', sa.Numeric(precision=5, scale=2), nullable=False),
        sa.ForeignKeyConstraint(['outlet_id'], ['outlets.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('outlet_id'),
    )


def downgrade() -> None:
    op.drop_table('outlet_stats')
    op.drop_table('critic_stats')
    op.drop_table('title_stats')
    op.drop_index(op.f('ix_reviews_scale_id'), table_name='reviews')
    op.drop_index(op.f('ix_reviews_feature_id'), table_name='reviews')
    op.drop_index(op.f('ix_reviews_critic_id'), table_name='reviews')
    op.drop_table('reviews')
    op.drop_index(op.f('ix_critics_outlet_id'), table_name='critics')
    op.drop_table('critics')
    op.drop_index(op.f('ix_outlets_name'), table_name='outlets')
    op.drop_table('outlets')
    op.drop_table('rating_scales')
    certification.drop(op.get_bind(), checkfirst=True)
    recommendation.drop(op.get_bind(), checkfirst=True)
    # `features` belongs to the catalog and is left in place
