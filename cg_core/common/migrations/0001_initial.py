from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ReferenceSequence",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("model_label", models.CharField(max_length=100)),
                ("prefix", models.CharField(max_length=20)),
                ("last_number", models.PositiveIntegerField(default=0)),
            ],
            options={
                "db_table": "reference_sequence",
            },
        ),
        migrations.AddConstraint(
            model_name="referencesequence",
            constraint=models.UniqueConstraint(fields=("model_label", "prefix"), name="uq_reference_sequence"),
        ),
    ]
