"""initial election schema

Revision ID: 001
Revises:
Create Date: 2026-10-17
"""
from alembic import op
import sqlalchemy as sa

revision  = "001"
down_revision = None
branch_labels = None
depends_on    = None


def _created_at():
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())


def upgrade() -> None:
    op.create_table(
        "admins",
        sa.Column("id",            sa.Integer(),               primary_key=True, autoincrement=True),
        sa.Column("name",          sa.String(255),             nullable=False),
        sa.Column("email",         sa.String(255),             nullable=False),
        sa.Column("password_hash", sa.Text(),                  nullable=False),
        sa.Column("is_active",     sa.Boolean(),               nullable=False, server_default="true"),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )
    op.create_index("ix_admins_email", "admins", ["email"], unique=True)
    op.create_index("ix_admins_id",    "admins", ["id"],    unique=False)

    # ── OTP + rate limiting ──────────────────────────────────────────
    op.create_table(
        "otp_codes",
        sa.Column("id",         sa.String(36),              primary_key=True),
        sa.Column("email",      sa.String(255),             nullable=False),
        sa.Column("code",       sa.String(6),               nullable=False),
        sa.Column("purpose",    sa.String(20),              nullable=False, server_default="login"),
        sa.Column("used",       sa.Boolean(),               nullable=False, server_default="false"),
        _created_at(),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_otp_codes_email",      "otp_codes", ["email"])
    op.create_index("ix_otp_codes_expires_at", "otp_codes", ["expires_at"])
    op.create_index("ix_otp_codes_email_used", "otp_codes", ["email", "used"])

    op.create_table(
        "rate_limits",
        sa.Column("id",               sa.String(36),              primary_key=True),
        sa.Column("identifier",       sa.String(255),             nullable=False),
        sa.Column("action_type",      sa.String(50),              nullable=False),
        sa.Column("attempt_count",    sa.Integer(),               nullable=False, server_default="0"),
        sa.Column("first_attempt_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("last_attempt_at",  sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("locked_until",     sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("identifier", "action_type", name="uq_rate_limits_identifier_action"),
    )
    op.create_index("ix_rate_limits_identifier", "rate_limits", ["identifier"])

    # ── Voters ───────────────────────────────────────────────────────
    op.create_table(
        "student_list",
        sa.Column("id",         sa.String(36),  primary_key=True),
        sa.Column("matric",     sa.String(30),  nullable=False),
        sa.Column("name",       sa.String(150), nullable=False),
        sa.Column("department", sa.String(80),  nullable=False),
        sa.Column("level",      sa.String(10),  nullable=True),
        _created_at(),
    )
    op.create_index("ix_student_list_matric", "student_list", ["matric"], unique=True)

    op.create_table(
        "voter_profiles",
        sa.Column("id",             sa.String(36),              primary_key=True),
        sa.Column("matric",         sa.String(30),              nullable=False),
        sa.Column("name",           sa.String(150),             nullable=False),
        sa.Column("email",          sa.String(255),             nullable=False),
        sa.Column("verified",       sa.Boolean(),               nullable=False, server_default="false"),
        sa.Column("voted",          sa.Boolean(),               nullable=False, server_default="false"),
        sa.Column("voted_at",       sa.DateTime(timezone=True), nullable=True),
        sa.Column("issuance_token", sa.String(64),              nullable=True, unique=True),
        sa.Column("user_id",        sa.String(64),              nullable=True),
        sa.Column("registered_at",  sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_voter_profiles_matric", "voter_profiles", ["matric"], unique=True)
    op.create_index("ix_voter_profiles_email",  "voter_profiles", ["email"],  unique=True)

    op.create_table(
        "audit_logs",
        sa.Column("id",          sa.String(36),  primary_key=True),
        sa.Column("user_id",     sa.String(64),  nullable=True),
        sa.Column("user_type",   sa.String(20),  nullable=False, server_default="admin"),
        sa.Column("action",      sa.String(100), nullable=False),
        sa.Column("entity_type", sa.String(50),  nullable=True),
        sa.Column("entity_id",   sa.String(64),  nullable=True),
        sa.Column("details",     sa.JSON(),      nullable=True),
        sa.Column("ip_address",  sa.String(45),  nullable=True),
        _created_at(),
    )
    op.create_index("ix_audit_logs_user_id", "audit_logs", ["user_id"])
    op.create_index("ix_audit_logs_action",  "audit_logs", ["action"])

    # ── Aspirants ────────────────────────────────────────────────────
    op.create_table(
        "aspirant_positions",
        sa.Column("id",                   sa.String(36),  primary_key=True),
        sa.Column("position_name",        sa.String(150), nullable=False),
        sa.Column("description",          sa.Text(),      nullable=True),
        sa.Column("fee",                  sa.Integer(),   nullable=False, server_default="0"),
        sa.Column("min_cgpa",             sa.Float(),     nullable=False, server_default="0"),
        sa.Column("eligible_departments", sa.JSON(),      nullable=False),
        sa.Column("eligible_levels",      sa.JSON(),      nullable=False),
        sa.Column("eligible_gender",      sa.String(10),  nullable=True),
        sa.Column("is_active",            sa.Boolean(),   nullable=False, server_default="true"),
        sa.Column("display_order",        sa.Integer(),   nullable=False, server_default="0"),
        _created_at(),
    )

    op.create_table(
        "aspirant_applications",
        sa.Column("id",                           sa.String(36),  primary_key=True),
        sa.Column("user_id",                      sa.String(64),  nullable=True),
        sa.Column("full_name",                    sa.String(150), nullable=False),
        sa.Column("matric",                       sa.String(30),  nullable=False),
        sa.Column("department",                   sa.String(80),  nullable=False),
        sa.Column("level",                        sa.String(10),  nullable=False),
        sa.Column("gender",                       sa.String(10),  nullable=False),
        sa.Column("date_of_birth",                sa.Date(),      nullable=False),
        sa.Column("phone",                        sa.String(20),  nullable=False),
        sa.Column("photo_url",                    sa.Text(),      nullable=False),
        sa.Column(
            "position_id",
            sa.String(36),
            sa.ForeignKey("aspirant_positions.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("why_running",                  sa.Text(),      nullable=False),
        sa.Column("cgpa",                         sa.Float(),     nullable=False),
        sa.Column("leadership_history",           sa.Text(),      nullable=False),
        sa.Column("referee_declaration_accepted", sa.Boolean(),   nullable=False, server_default="false"),
        sa.Column("payment_proof_url",            sa.Text(),      nullable=False),
        sa.Column("payment_verified",             sa.Boolean(),   nullable=False, server_default="false"),
        sa.Column("status",                       sa.String(20),  nullable=False, server_default="pending"),
        sa.Column("admin_notes",                  sa.Text(),      nullable=True),
        sa.Column("submitted_at",                 sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.Column("updated_at",                   sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_aspirant_applications_user_id",     "aspirant_applications", ["user_id"])
    op.create_index("ix_aspirant_applications_matric",      "aspirant_applications", ["matric"])
    op.create_index("ix_aspirant_applications_position_id", "aspirant_applications", ["position_id"])
    op.create_index("ix_aspirant_applications_status",      "aspirant_applications", ["status"])

    # ── Voting ───────────────────────────────────────────────────────
    op.create_table(
        "voting_positions",
        sa.Column("id",             sa.String(36),  primary_key=True),
        sa.Column("position_name",  sa.String(150), nullable=False),
        sa.Column("display_order",  sa.Integer(),   nullable=False, server_default="0"),
        sa.Column("vote_type",      sa.String(10),  nullable=False, server_default="single"),
        sa.Column("max_selections", sa.Integer(),   nullable=False, server_default="1"),
        sa.Column("is_active",      sa.Boolean(),   nullable=False, server_default="true"),
        sa.Column("created_at",     sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
    )

    op.create_table(
        "candidates",
        sa.Column("id",         sa.String(36),  primary_key=True),
        sa.Column("name",       sa.String(150), nullable=False),
        sa.Column("matric",     sa.String(30),  nullable=False),
        sa.Column("department", sa.String(80),  nullable=False),
        sa.Column("photo_url",  sa.Text(),      nullable=True),
        sa.Column("manifesto",  sa.Text(),      nullable=True),
        sa.Column(
            "voting_position_id",
            sa.String(36),
            sa.ForeignKey("voting_positions.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column(
            "application_id",
            sa.String(36),
            sa.ForeignKey("aspirant_applications.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
    )
    op.create_index("ix_candidates_voting_position_id", "candidates", ["voting_position_id"])

    op.create_table(
        "votes",
        sa.Column("id",             sa.String(36), primary_key=True),
        sa.Column("issuance_token", sa.String(64), nullable=False),
        sa.Column(
            "candidate_id",
            sa.String(36),
            sa.ForeignKey("candidates.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "voting_position_id",
            sa.String(36),
            sa.ForeignKey("voting_positions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.UniqueConstraint("issuance_token", "candidate_id", name="uq_vote_token_candidate"),
    )
    op.create_index("ix_votes_issuance_token", "votes", ["issuance_token"])


def downgrade() -> None:
    op.drop_table("votes")
    op.drop_table("candidates")
    op.drop_table("voting_positions")
    op.drop_table("aspirant_applications")
    op.drop_table("aspirant_positions")
    op.drop_table("audit_logs")
    op.drop_table("voter_profiles")
    op.drop_table("student_list")
    op.drop_table("rate_limits")
    op.drop_table("otp_codes")
    op.drop_index("ix_admins_email", table_name="admins")
    op.drop_index("ix_admins_id",    table_name="admins")
    op.drop_table("admins")
