"""001 – Initial schema: users, employees, compensation, attendance,
menu access overrides, payrolls, audit trail.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000+07:00
"""

from alembic import op

# Revision identifiers
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

# Enum columns are VARCHAR(20) guarded by CHECK constraints so new values
# only need a constraint swap, not an ALTER TYPE.
ENUM_VALUES: dict[str, list[str]] = {
    "user_role": ["admin", "hr", "employee"],
    "marital_status": ["lajang", "kawin"],
    "attendance_status": ["hadir", "terlambat", "alpha", "izin", "sakit", "cuti"],
    "payroll_status": ["draft", "processed", "paid"],
}


def _check(column: str, enum_name: str) -> str:
    vals = ", ".join(f"'{v}'" for v in ENUM_VALUES[enum_name])
    return f"CHECK ({column} IN ({vals}))"


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    # ── Extensions ────────────────────────────────────────────────────────
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ── 1. users ──────────────────────────────────────────────────────────
    op.execute(f"""
        CREATE TABLE users (
            id          UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            name        VARCHAR(255) NOT NULL,
            email       VARCHAR(255) NOT NULL UNIQUE,
            role        VARCHAR(20)  NOT NULL DEFAULT 'employee' {_check("role", "user_role")},
            is_active   BOOLEAN DEFAULT TRUE,
            created_at  TIMESTAMPTZ DEFAULT NOW(),
            updated_at  TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # ── 2. user_sessions ──────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE user_sessions (
            id          UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            user_id     UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            token_hash  VARCHAR(512) NOT NULL,
            expires_at  TIMESTAMPTZ NOT NULL,
            is_revoked  BOOLEAN DEFAULT FALSE,
            created_at  TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX idx_sessions_user  ON user_sessions(user_id)")
    op.execute("CREATE INDEX idx_sessions_token ON user_sessions(token_hash)")

    # ── 3. employees ──────────────────────────────────────────────────────
    op.execute(f"""
        CREATE TABLE employees (
            id               UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            user_id          UUID NOT NULL UNIQUE REFERENCES users(id) ON DELETE CASCADE,
            employee_number  VARCHAR(50) NOT NULL UNIQUE,
            marital_status   VARCHAR(20) DEFAULT 'lajang' {_check("marital_status", "marital_status")},
            dependents       INTEGER DEFAULT 0,
            join_date        DATE NOT NULL,
            is_active        BOOLEAN DEFAULT TRUE,
            created_at       TIMESTAMPTZ DEFAULT NOW(),
            updated_at       TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # ── 4. employee_salaries ──────────────────────────────────────────────
    op.execute("""
        CREATE TABLE employee_salaries (
            id                    UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id           UUID NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
            basic_salary          NUMERIC(15,2) NOT NULL,
            transport_allowance   NUMERIC(15,2) DEFAULT 0,
            meal_allowance        NUMERIC(15,2) DEFAULT 0,
            housing_allowance     NUMERIC(15,2) DEFAULT 0,
            position_allowance    NUMERIC(15,2) DEFAULT 0,
            bpjs_kes_employee     NUMERIC(15,2) DEFAULT 0,
            bpjs_kes_company      NUMERIC(15,2) DEFAULT 0,
            bpjs_tk_jht_employee  NUMERIC(15,2) DEFAULT 0,
            bpjs_tk_jht_company   NUMERIC(15,2) DEFAULT 0,
            bpjs_tk_jkk           NUMERIC(15,2) DEFAULT 0,
            bpjs_tk_jkm           NUMERIC(15,2) DEFAULT 0,
            bpjs_tk_jp_employee   NUMERIC(15,2) DEFAULT 0,
            bpjs_tk_jp_company    NUMERIC(15,2) DEFAULT 0,
            effective_date        DATE NOT NULL,
            created_at            TIMESTAMPTZ DEFAULT NOW(),
            updated_at            TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute(
        "CREATE INDEX idx_salary_emp_effective "
        "ON employee_salaries(employee_id, effective_date DESC)"
    )

    # ── 5. attendance_records ─────────────────────────────────────────────
    op.execute(f"""
        CREATE TABLE attendance_records (
            id              UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id     UUID NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
            date            DATE NOT NULL,
            status          VARCHAR(20) NOT NULL DEFAULT 'hadir' {_check("status", "attendance_status")},
            overtime_hours  NUMERIC(5,2) DEFAULT 0,
            notes           TEXT,
            created_at      TIMESTAMPTZ DEFAULT NOW(),
            updated_at      TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT uq_attendance_emp_date UNIQUE (employee_id, date)
        )
    """)

    # ── 6. menu_access_overrides ──────────────────────────────────────────
    op.execute("""
        CREATE TABLE menu_access_overrides (
            id          UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            user_id     UUID NOT NULL UNIQUE REFERENCES users(id) ON DELETE CASCADE,
            menu_keys   JSONB NOT NULL DEFAULT '[]',
            updated_by  UUID REFERENCES users(id) ON DELETE SET NULL,
            created_at  TIMESTAMPTZ DEFAULT NOW(),
            updated_at  TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # ── 7. payrolls ───────────────────────────────────────────────────────
    op.execute(f"""
        CREATE TABLE payrolls (
            id                  UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id         UUID NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
            period_month        INTEGER NOT NULL,
            period_year         INTEGER NOT NULL,
            working_days        INTEGER DEFAULT 0,
            present_days        INTEGER DEFAULT 0,
            basic_salary        NUMERIC(15,2) DEFAULT 0,
            total_allowances    NUMERIC(15,2) DEFAULT 0,
            overtime_pay        NUMERIC(15,2) DEFAULT 0,
            thr                 NUMERIC(15,2) DEFAULT 0,
            gross_salary        NUMERIC(15,2) DEFAULT 0,
            bpjs_kes_deduction  NUMERIC(15,2) DEFAULT 0,
            bpjs_tk_deduction   NUMERIC(15,2) DEFAULT 0,
            pph21               NUMERIC(15,2) DEFAULT 0,
            other_deductions    NUMERIC(15,2) DEFAULT 0,
            total_deductions    NUMERIC(15,2) DEFAULT 0,
            net_salary          NUMERIC(15,2) DEFAULT 0,
            status              VARCHAR(20) NOT NULL DEFAULT 'draft' {_check("status", "payroll_status")},
            paid_at             TIMESTAMPTZ,
            notes               TEXT,
            created_at          TIMESTAMPTZ DEFAULT NOW(),
            updated_at          TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT uq_payroll_employee_period UNIQUE (employee_id, period_month, period_year),
            CONSTRAINT ck_payroll_period_month CHECK (period_month BETWEEN 1 AND 12)
        )
    """)
    op.execute("CREATE INDEX ix_payrolls_employee_id ON payrolls(employee_id)")
    op.execute("CREATE INDEX ix_payrolls_period ON payrolls(period_year, period_month)")

    # ── 8. audit_trail ────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE audit_trail (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            actor_id     UUID REFERENCES users(id) ON DELETE SET NULL,
            action       VARCHAR(50) NOT NULL,
            entity_type  VARCHAR(50) NOT NULL,
            entity_id    UUID NOT NULL,
            old_values   JSONB,
            new_values   JSONB,
            created_at   TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_audit_trail_actor_id   ON audit_trail(actor_id)")
    op.execute("CREATE INDEX ix_audit_trail_entity     ON audit_trail(entity_type, entity_id)")
    op.execute("CREATE INDEX ix_audit_trail_created_at ON audit_trail(created_at)")


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    # Drop tables in reverse dependency order
    tables = [
        "audit_trail",
        "payrolls",
        "menu_access_overrides",
        "attendance_records",
        "employee_salaries",
        "employees",
        "user_sessions",
        "users",
    ]
    for t in tables:
        op.execute(f"DROP TABLE IF EXISTS {t} CASCADE")

    op.execute('DROP EXTENSION IF EXISTS "uuid-ossp"')
