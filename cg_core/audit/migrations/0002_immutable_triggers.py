from django.db import migrations

POSTGRES_INSTALL = [
    """
    CREATE OR REPLACE FUNCTION audit_log_entry_immutable() RETURNS trigger AS $$
    BEGIN
        RAISE EXCEPTION 'Audit logs are immutable: % is not permitted', lower(TG_OP);
    END;
    $$ LANGUAGE plpgsql;
    """,
    """
    CREATE TRIGGER audit_log_entry_no_update_delete
    BEFORE UPDATE OR DELETE ON audit_log_entry
    FOR EACH ROW EXECUTE FUNCTION audit_log_entry_immutable();
    """,
]

POSTGRES_DROP = [
    "DROP TRIGGER IF EXISTS audit_log_entry_no_update_delete ON audit_log_entry;",
    "DROP FUNCTION IF EXISTS audit_log_entry_immutable();",
]

SQLITE_INSTALL = [
    """
    CREATE TRIGGER IF NOT EXISTS audit_log_entry_no_update
    BEFORE UPDATE ON audit_log_entry
    BEGIN
        SELECT RAISE(ABORT, 'Audit logs are immutable: update is not permitted');
    END;
    """,
    """
    CREATE TRIGGER IF NOT EXISTS audit_log_entry_no_delete
    BEFORE DELETE ON audit_log_entry
    BEGIN
        SELECT RAISE(ABORT, 'Audit logs are immutable: delete is not permitted');
    END;
    """,
]

SQLITE_DROP = [
    "DROP TRIGGER IF EXISTS audit_log_entry_no_update;",
    "DROP TRIGGER IF EXISTS audit_log_entry_no_delete;",
]


def _run(schema_editor, statements_by_vendor):
    statements = statements_by_vendor.get(schema_editor.connection.vendor, [])
    for sql in statements:
        schema_editor.execute(sql, params=None)


def install(apps, schema_editor):
    _run(schema_editor, {"postgresql": POSTGRES_INSTALL, "sqlite": SQLITE_INSTALL})


def uninstall(apps, schema_editor):
    _run(schema_editor, {"postgresql": POSTGRES_DROP, "sqlite": SQLITE_DROP})


class Migration(migrations.Migration):

    dependencies = [
        ("audit", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(install, uninstall),
    ]
