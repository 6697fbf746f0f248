"""initial tables

Revision ID: 0001
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    # enums
    room_status = sa.Enum('free', 'occupied', name='room_status')
    allocation_kind = sa.Enum('recurring', 'one_off', name='allocation_kind')
    allocation_status = sa.Enum('pending', 'confirmed', 'cancelled', name='allocation_status')

    bind = op.get_bind()
    if bind.dialect.name != "sqlite":
        room_status.create(bind, checkfirst=True)
        allocation_kind.create(bind, checkfirst=True)
        allocation_status.create(bind, checkfirst=True)

    op.create_table('professor',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=True, unique=True),
    )

    op.create_table('discipline',
        sa.Column('name', sa.String(255), primary_key=True),
        sa.Column('shift', sa.String(32), primary_key=True),
        sa.Column('load', sa.Integer(), nullable=False),
        sa.Column('course', sa.String(255), nullable=False),
        sa.Column('course_semester', sa.Integer(), nullable=False),
        sa.CheckConstraint('load >= 1', name='ck_discipline_load_positive'),
    )
    op.create_index('ix_discipline_cohort', 'discipline', ['course', 'course_semester'])

    op.create_table('room',
        sa.Column('number', sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column('room_type', sa.String(64), primary_key=True),
        sa.Column('status', room_status, nullable=False, server_default='free'),
    )

    op.create_table('teaching_schedule',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('professor_id', sa.Integer(), sa.ForeignKey('professor.id', ondelete='CASCADE'), nullable=False),
        sa.Column('discipline_name', sa.String(255), nullable=False),
        sa.Column('discipline_shift', sa.String(32), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('half', sa.Integer(), nullable=False),
        sa.Column('weekday', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.ForeignKeyConstraint(['discipline_name', 'discipline_shift'], ['discipline.name', 'discipline.shift'],
                                ondelete='CASCADE', onupdate='CASCADE'),
        sa.UniqueConstraint('professor_id', 'discipline_name', 'discipline_shift', 'year', 'half',
                            name='uq_teaching_schedule_offering_term'),
        sa.CheckConstraint('weekday BETWEEN 1 AND 7', name='ck_teaching_schedule_weekday'),
    )
    op.create_index('ix_teaching_schedule_term_day', 'teaching_schedule', ['year', 'half', 'weekday'])

    op.create_table('allocation',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('room_number', sa.Integer(), nullable=False),
        sa.Column('room_type', sa.String(64), nullable=False),
        sa.Column('teaching_schedule_id', sa.Integer(),
                  sa.ForeignKey('teaching_schedule.id', ondelete='CASCADE'), nullable=False),
        sa.Column('professor_id', sa.Integer(), nullable=False),
        sa.Column('discipline_name', sa.String(255), nullable=False),
        sa.Column('discipline_shift', sa.String(32), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('half', sa.Integer(), nullable=False),
        sa.Column('weekday', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('kind', allocation_kind, nullable=False, server_default='recurring'),
        sa.Column('status', allocation_status, nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['room_number', 'room_type'], ['room.number', 'room.room_type'],
                                ondelete='RESTRICT', onupdate='CASCADE'),
        sa.ForeignKeyConstraint(['discipline_name', 'discipline_shift'], ['discipline.name', 'discipline.shift'],
                                ondelete='CASCADE', onupdate='CASCADE'),
        sa.UniqueConstraint('room_number', 'room_type', 'professor_id', 'discipline_name',
                            'discipline_shift', 'year', 'half', name='uq_allocation_key'),
    )
    op.create_index('ix_allocation_teaching_schedule_id', 'allocation', ['teaching_schedule_id'])
    op.create_index('ix_allocation_room_term_day', 'allocation',
                    ['room_number', 'room_type', 'year', 'half', 'weekday'])

def downgrade():
    op.drop_index('ix_allocation_room_term_day', table_name='allocation')
    op.drop_index('ix_allocation_teaching_schedule_id', table_name='allocation')
    op.drop_table('allocation')
    op.drop_index('ix_teaching_schedule_term_day', table_name='teaching_schedule')
    op.drop_table('teaching_schedule')
    op.drop_table('room')
    op.drop_index('ix_discipline_cohort', table_name='discipline')
    op.drop_table('discipline')
    op.drop_table('professor')

    bind = op.get_bind()
    if bind.dialect.name != "sqlite":
        for name in ('allocation_status', 'allocation_kind', 'room_status'):
            sa.Enum(name=name).drop(bind, checkfirst=True)
