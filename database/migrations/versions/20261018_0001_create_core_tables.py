"""create core tables

Revision ID: 20261018_0001
Revises: None
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


user_role_enum = sa.Enum("admin", "faculty", name="user_role")
employment_type_enum = sa.Enum("full_time", "part_time", "visiting", name="employment_type")


def _id_column() -> sa.Column:
    return sa.Column("id", sa.String(length=36), primary_key=True, nullable=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "faculty",
        _id_column(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone_number", sa.String(length=30), nullable=True),
        sa.Column("employment_type", employment_type_enum, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_faculty_email", "faculty", ["email"], unique=True)

    op.create_table(
        "users",
        _id_column(),
        sa.Column("username", sa.String(length=200), nullable=False),
        sa.Column("role", user_role_enum, nullable=False),
        sa.Column("faculty_id", sa.String(length=36), sa.ForeignKey("faculty.id", ondelete="SET NULL"), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_faculty_id", "users", ["faculty_id"])

    op.create_table(
        "skills",
        _id_column(),
        sa.Column("name", sa.String(length=200), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "faculty_skills",
        _id_column(),
        sa.Column("faculty_id", sa.String(length=36), sa.ForeignKey("faculty.id", ondelete="CASCADE"), nullable=False),
        sa.Column("skill_id", sa.String(length=36), sa.ForeignKey("skills.id", ondelete="CASCADE"), nullable=False),
        sa.UniqueConstraint("faculty_id", "skill_id", name="uq_faculty_skills_pair"),
    )
    op.create_index("ix_faculty_skills_faculty_id", "faculty_skills", ["faculty_id"])
    op.create_index("ix_faculty_skills_skill_id", "faculty_skills", ["skill_id"])

    op.create_table(
        "faculty_availability",
        _id_column(),
        sa.Column("faculty_id", sa.String(length=36), sa.ForeignKey("faculty.id", ondelete="CASCADE"), nullable=False),
        sa.Column("day_of_week", sa.String(length=10), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.UniqueConstraint("faculty_id", "day_of_week", name="uq_faculty_availability_day"),
    )
    op.create_index("ix_faculty_availability_faculty_id", "faculty_availability", ["faculty_id"])

    op.create_table(
        "students",
        _id_column(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("admission_number", sa.String(length=50), nullable=False, unique=True),
        sa.Column("phone_number", sa.String(length=30), nullable=True),
        sa.Column("remarks", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_students_name", "students", ["name"])

    op.create_table(
        "batches",
        _id_column(),
        sa.Column("name", sa.String(length=200), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("faculty_id", sa.String(length=36), sa.ForeignKey("faculty.id", ondelete="SET NULL"), nullable=True),
        sa.Column("skill_id", sa.String(length=36), sa.ForeignKey("skills.id", ondelete="SET NULL"), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("days_of_week", sa.JSON(), nullable=False),
        sa.Column("max_students", sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_batches_faculty_id", "batches", ["faculty_id"])
    op.create_index("ix_batches_skill_id", "batches", ["skill_id"])
    op.create_index("ix_batches_end_date", "batches", ["end_date"])

    op.create_table(
        "batch_students",
        _id_column(),
        sa.Column("batch_id", sa.String(length=36), sa.ForeignKey("batches.id", ondelete="CASCADE"), nullable=False),
        sa.Column("student_id", sa.String(length=36), sa.ForeignKey("students.id", ondelete="CASCADE"), nullable=False),
        sa.UniqueConstraint("batch_id", "student_id", name="uq_batch_students_pair"),
    )
    op.create_index("ix_batch_students_batch_id", "batch_students", ["batch_id"])
    op.create_index("ix_batch_students_student_id", "batch_students", ["student_id"])

    op.create_table(
        "faculty_substitutions",
        _id_column(),
        sa.Column("batch_id", sa.String(length=36), sa.ForeignKey("batches.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "original_faculty_id",
            sa.String(length=36),
            sa.ForeignKey("faculty.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "substitute_faculty_id",
            sa.String(length=36),
            sa.ForeignKey("faculty.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("substitute_faculty_id <> original_faculty_id", name="ck_substitution_distinct_faculty"),
        sa.CheckConstraint("start_date <= end_date", name="ck_substitution_date_order"),
    )
    op.create_index("ix_faculty_substitutions_batch_id", "faculty_substitutions", ["batch_id"])
    op.create_index("ix_faculty_substitutions_substitute_faculty_id", "faculty_substitutions", ["substitute_faculty_id"])
    op.create_index("ix_faculty_substitutions_end_date", "faculty_substitutions", ["end_date"])

    op.create_table(
        "student_attendance",
        _id_column(),
        sa.Column("batch_id", sa.String(length=36), sa.ForeignKey("batches.id", ondelete="CASCADE"), nullable=False),
        sa.Column("student_id", sa.String(length=36), sa.ForeignKey("students.id", ondelete="CASCADE"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("is_present", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("batch_id", "student_id", "date", name="uq_student_attendance_day"),
    )
    op.create_index("ix_student_attendance_batch_id", "student_attendance", ["batch_id"])
    op.create_index("ix_student_attendance_student_id", "student_attendance", ["student_id"])
    op.create_index("ix_student_attendance_date", "student_attendance", ["date"])

    op.create_table(
        "activities",
        _id_column(),
        sa.Column("user_id", sa.String(length=36), nullable=True),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("item", sa.String(length=500), nullable=False),
        sa.Column("entity_type", sa.String(length=50), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_activities_created_at", "activities", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_activities_created_at", table_name="activities")
    op.drop_table("activities")
    op.drop_table("student_attendance")
    op.drop_table("faculty_substitutions")
    op.drop_table("batch_students")
    op.drop_table("batches")
    op.drop_table("students")
    op.drop_table("faculty_availability")
    op.drop_table("faculty_skills")
    op.drop_table("skills")
    op.drop_index("ix_users_faculty_id", table_name="users")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
    op.drop_index("ix_faculty_email", table_name="faculty")
    op.drop_table("faculty")
    user_role_enum.drop(op.get_bind(), checkfirst=True)
    employment_type_enum.drop(op.get_bind(), checkfirst=True)
