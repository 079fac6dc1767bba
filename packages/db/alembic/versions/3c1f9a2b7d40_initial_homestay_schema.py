# This project was developed with assistance from AI tools.
"""initial homestay schema

Revision ID: 3c1f9a2b7d40
Revises:
Create Date: 2025-11-03 10:12:41.508213

"""

import sqlalchemy as sa
from alembic import op

revision = "3c1f9a2b7d40"
down_revision = None
branch_labels = None
depends_on = None


def _timestamp(name: str, nullable: bool = True) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(255), nullable=False),
        sa.Column("role", sa.String(50), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("mobile", sa.String(20), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("district", sa.String(100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "homestay_applications",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("application_number", sa.String(50), nullable=True),
        sa.Column("owner_id", sa.String(255), nullable=False),
        sa.Column("application_kind", sa.String(50), nullable=False),
        sa.Column("status", sa.String(50), nullable=False),
        sa.Column("current_stage", sa.String(50), nullable=False),
        sa.Column("correction_submission_count", sa.Integer(), nullable=False, server_default="0"),
        # Property
        sa.Column("property_name", sa.String(255), nullable=True),
        sa.Column("category", sa.String(20), nullable=True),
        sa.Column("selected_category", sa.String(20), nullable=True),
        sa.Column("location_type", sa.String(20), nullable=True),
        sa.Column("certificate_validity_years", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("is_special_subdivision", sa.Boolean(), nullable=False, server_default=sa.false()),
        # Address
        sa.Column("district", sa.String(100), nullable=True),
        sa.Column("district_other", sa.String(100), nullable=True),
        sa.Column("tehsil", sa.String(100), nullable=True),
        sa.Column("tehsil_other", sa.String(100), nullable=True),
        sa.Column("block", sa.String(100), nullable=True),
        sa.Column("block_other", sa.String(100), nullable=True),
        sa.Column("gram_panchayat", sa.String(100), nullable=True),
        sa.Column("gram_panchayat_other", sa.String(100), nullable=True),
        sa.Column("urban_body", sa.String(200), nullable=True),
        sa.Column("urban_body_other", sa.String(200), nullable=True),
        sa.Column("ward", sa.String(50), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("pincode", sa.String(10), nullable=True),
        # Owner
        sa.Column("owner_name", sa.String(255), nullable=True),
        sa.Column("owner_gender", sa.String(20), nullable=True),
        sa.Column("owner_mobile", sa.String(20), nullable=True),
        sa.Column("owner_email", sa.String(255), nullable=True),
        sa.Column("owner_aadhaar", sa.String(12), nullable=True),
        # Rooms
        sa.Column("single_bed_rooms", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("single_bed_beds", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("single_bed_room_rate", sa.Numeric(10, 2), nullable=True),
        sa.Column("double_bed_rooms", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("double_bed_beds", sa.Integer(), nullable=False, server_default="2"),
        sa.Column("double_bed_room_rate", sa.Numeric(10, 2), nullable=True),
        sa.Column("family_suites", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("family_suite_beds", sa.Integer(), nullable=False, server_default="4"),
        sa.Column("family_suite_rate", sa.Numeric(10, 2), nullable=True),
        sa.Column("attached_washrooms", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_rooms", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_beds", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("highest_room_rate", sa.Numeric(10, 2), nullable=True),
        # Fee breakdown
        sa.Column("base_fee", sa.Numeric(12, 2), nullable=True),
        sa.Column("total_before_discounts", sa.Numeric(12, 2), nullable=True),
        sa.Column("validity_discount", sa.Numeric(12, 2), nullable=True),
        sa.Column("female_owner_discount", sa.Numeric(12, 2), nullable=True),
        sa.Column("special_subdivision_discount", sa.Numeric(12, 2), nullable=True),
        sa.Column("total_discount", sa.Numeric(12, 2), nullable=True),
        sa.Column("total_fee", sa.Numeric(12, 2), nullable=True),
        # Review
        sa.Column("da_id", sa.String(255), nullable=True),
        _timestamp("da_review_date"),
        _timestamp("da_forwarded_date"),
        sa.Column("da_remarks", sa.Text(), nullable=True),
        sa.Column("dtdo_id", sa.String(255), nullable=True),
        _timestamp("dtdo_review_date"),
        sa.Column("dtdo_remarks", sa.Text(), nullable=True),
        sa.Column("district_notes", sa.Text(), nullable=True),
        sa.Column("clarification_requested", sa.Text(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        # Site inspection
        _timestamp("site_inspection_scheduled_date"),
        sa.Column("site_inspection_officer_id", sa.String(255), nullable=True),
        _timestamp("site_inspection_completed_date"),
        sa.Column("site_inspection_outcome", sa.String(30), nullable=True),
        sa.Column("site_inspection_notes", sa.Text(), nullable=True),
        # Service linkage
        sa.Column("parent_application_id", sa.String(36), nullable=True),
        sa.Column("parent_application_number", sa.String(50), nullable=True),
        sa.Column("parent_certificate_number", sa.String(50), nullable=True),
        sa.Column("service_context", sa.JSON(), nullable=True),
        # Certificate
        sa.Column("certificate_number", sa.String(50), nullable=True),
        _timestamp("certificate_issued_date"),
        _timestamp("certificate_expiry_date"),
        _timestamp("submitted_at"),
        _timestamp("approved_at"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["parent_application_id"], ["homestay_applications.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("application_number"),
        sa.UniqueConstraint("certificate_number"),
    )
    op.create_index(
        "ix_homestay_applications_application_number", "homestay_applications", ["application_number"]
    )
    op.create_index("ix_homestay_applications_owner_id", "homestay_applications", ["owner_id"])
    op.create_index("ix_homestay_applications_status", "homestay_applications", ["status"])
    op.create_index("ix_homestay_applications_district", "homestay_applications", ["district"])
    op.create_index(
        "ix_homestay_applications_parent_application_id",
        "homestay_applications",
        ["parent_application_id"],
    )

    op.create_table(
        "documents",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("application_id", sa.String(36), nullable=False),
        sa.Column("document_type", sa.String(50), nullable=False),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("file_path", sa.String(500), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=False),
        sa.Column("mime_type", sa.String(100), nullable=True),
        sa.Column("verification_status", sa.String(30), nullable=False),
        sa.Column("verification_notes", sa.Text(), nullable=True),
        sa.Column("verified_by", sa.String(255), nullable=True),
        _timestamp("verification_date"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["application_id"], ["homestay_applications.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_documents_application_id", "documents", ["application_id"])

    op.create_table(
        "application_actions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("application_id", sa.String(36), nullable=False),
        sa.Column("actor_id", sa.String(255), nullable=False),
        sa.Column("actor_role", sa.String(50), nullable=True),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("previous_status", sa.String(50), nullable=True),
        sa.Column("new_status", sa.String(50), nullable=True),
        sa.Column("feedback", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["application_id"], ["homestay_applications.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_application_actions_application_id", "application_actions", ["application_id"])

    op.create_table(
        "system_settings",
        sa.Column("key", sa.String(100), nullable=False),
        sa.Column("value", sa.JSON(), nullable=False),
        sa.Column("updated_by", sa.String(255), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("key"),
    )


def downgrade() -> None:
    op.drop_table("system_settings")
    op.drop_index("ix_application_actions_application_id", table_name="application_actions")
    op.drop_table("application_actions")
    op.drop_index("ix_documents_application_id", table_name="documents")
    op.drop_table("documents")
    op.drop_index("ix_homestay_applications_parent_application_id", table_name="homestay_applications")
    op.drop_index("ix_homestay_applications_district", table_name="homestay_applications")
    op.drop_index("ix_homestay_applications_status", table_name="homestay_applications")
    op.drop_index("ix_homestay_applications_owner_id", table_name="homestay_applications")
    op.drop_index("ix_homestay_applications_application_number", table_name="homestay_applications")
    op.drop_table("homestay_applications")
    op.drop_table("users")
