"""create portal identity, navigation and workspace tables

Revision ID: 202610190001
Revises:
Create Date: 2026-10-19 00:00:00
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa


revision: str = "202610190001"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "portal_company",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "portal_user",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("login", sa.String(length=100), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role_type", sa.String(length=1), nullable=False),
        sa.Column("category", sa.String(length=1), nullable=False),
        sa.Column("mobile_no", sa.String(length=15), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("employee_id", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("login"),
        sa.UniqueConstraint("mobile_no"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_portal_user_login_status", "portal_user", ["login", "status"], unique=False)

    op.create_table(
        "portal_user_company",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("is_default", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.ForeignKeyConstraint(["company_id"], ["portal_company.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["portal_user.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "company_id", name="uq_portal_user_company"),
    )
    op.create_index(
        "ix_portal_user_company_default",
        "portal_user_company",
        ["user_id", "is_default", "is_active"],
        unique=False,
    )

    op.create_table(
        "portal_module",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("icon_path", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "portal_menu",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("module_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("menu_type", sa.String(length=32), nullable=True),
        sa.Column("redirect_page", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.ForeignKeyConstraint(["module_id"], ["portal_module.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_portal_menu_module_active", "portal_menu", ["module_id", "is_active"], unique=False)

    op.create_table(
        "portal_submenu",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("menu_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("redirect_page", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.ForeignKeyConstraint(["menu_id"], ["portal_menu.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "portal_user_right",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("role_type", sa.String(length=1), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=True),
        sa.Column("module_id", sa.Integer(), nullable=True),
        sa.Column("submenu_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["company_id"], ["portal_company.id"]),
        sa.ForeignKeyConstraint(["module_id"], ["portal_module.id"]),
        sa.ForeignKeyConstraint(["submenu_id"], ["portal_submenu.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["portal_user.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_portal_user_right_user_company",
        "portal_user_right",
        ["user_id", "company_id", "role_type"],
        unique=False,
    )
    op.create_index("ix_portal_user_right_module", "portal_user_right", ["module_id", "role_type"], unique=False)

    op.create_table(
        "portal_time_period",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "portal_notification",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("to_user_id", sa.Integer(), nullable=False),
        sa.Column("from_user_id", sa.Integer(), nullable=True),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("subject", sa.String(length=255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["company_id"], ["portal_company.id"]),
        sa.ForeignKeyConstraint(["from_user_id"], ["portal_user.id"]),
        sa.ForeignKeyConstraint(["to_user_id"], ["portal_user.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_portal_notification_inbox",
        "portal_notification",
        ["to_user_id", "company_id", "id"],
        unique=False,
    )

    op.create_table(
        "portal_contact",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("mobile", sa.String(length=20), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("address", sa.String(length=500), nullable=True),
        sa.Column("remark", sa.String(length=500), nullable=True),
        sa.ForeignKeyConstraint(["company_id"], ["portal_company.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_portal_contact_company_id"), "portal_contact", ["company_id"], unique=False)

    op.create_table(
        "portal_name_prefix",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=20), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "portal_employee",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name_prefix_id", sa.Integer(), nullable=True),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("middle_name", sa.String(length=100), nullable=True),
        sa.Column("last_name", sa.String(length=100), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.ForeignKeyConstraint(["name_prefix_id"], ["portal_name_prefix.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "portal_theme",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("is_default", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("navbar_bg", sa.String(length=32), nullable=False),
        sa.Column("sidebar_bg", sa.String(length=32), nullable=False),
        sa.Column("module_bg", sa.String(length=32), nullable=False),
        sa.Column("footer_bg", sa.String(length=32), nullable=False),
        sa.Column("menu_submenu_bg", sa.String(length=32), nullable=False),
        sa.Column("current_module_color", sa.String(length=32), nullable=False),
        sa.Column("menu_type_color", sa.String(length=32), nullable=False),
        sa.Column("navbar_font_color", sa.String(length=32), nullable=False),
        sa.Column("menu_header_bg", sa.String(length=32), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "portal_user_theme",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("theme_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["theme_id"], ["portal_theme.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["portal_user.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id"),
    )


def downgrade() -> None:
    op.drop_table("portal_user_theme")
    op.drop_table("portal_theme")
    op.drop_table("portal_employee")
    op.drop_table("portal_name_prefix")
    op.drop_index(op.f("ix_portal_contact_company_id"), table_name="portal_contact")
    op.drop_table("portal_contact")
    op.drop_index("ix_portal_notification_inbox", table_name="portal_notification")
    op.drop_table("portal_notification")
    op.drop_table("portal_time_period")
    op.drop_index("ix_portal_user_right_module", table_name="portal_user_right")
    op.drop_index("ix_portal_user_right_user_company", table_name="portal_user_right")
    op.drop_table("portal_user_right")
    op.drop_table("portal_submenu")
    op.drop_index("ix_portal_menu_module_active", table_name="portal_menu")
    op.drop_table("portal_menu")
    op.drop_table("portal_module")
    op.drop_index("ix_portal_user_company_default", table_name="portal_user_company")
    op.drop_table("portal_user_company")
    op.drop_index("ix_portal_user_login_status", table_name="portal_user")
    op.drop_table("portal_user")
    op.drop_table("portal_company")
