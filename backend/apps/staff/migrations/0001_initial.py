import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("organizations", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="StaffRecord",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "registration_id",
                    models.CharField(
                        help_text="Human-readable code, e.g. 'GPA/T/2024/001'",
                        max_length=64,
                        unique=True,
                    ),
                ),
                (
                    "identity_id",
                    models.CharField(
                        db_index=True,
                        help_text="Identity store user id of the teacher",
                        max_length=255,
                    ),
                ),
                ("first_name", models.CharField(max_length=150)),
                ("last_name", models.CharField(max_length=150)),
                ("gender", models.CharField(blank=True, max_length=20, null=True)),
                (
                    "cohort_year",
                    models.CharField(help_text="Year of entry, e.g. '2024'", max_length=4),
                ),
                ("initials", models.CharField(blank=True, max_length=4, null=True)),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="staffrecord_set",
                        to="organizations.organization",
                    ),
                ),
            ],
            options={
                "ordering": ["registration_id"],
                "indexes": [
                    models.Index(
                        fields=["organization", "cohort_year"], name="staff_org_cohort_idx"
                    )
                ],
            },
        ),
    ]
