from django.db import migrations


def seed_defaults(apps, schema_editor):
    from cg_core.iam.permission_codes import seed_role_permissions

    seed_role_permissions(apps.get_model("iam", "RolePermission"))


class Migration(migrations.Migration):

    dependencies = [
        ("iam", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_defaults, migrations.RunPython.noop),
    ]
