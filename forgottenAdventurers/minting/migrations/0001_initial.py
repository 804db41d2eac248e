import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="CoordinatorState",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("address", models.CharField(max_length=42, unique=True)),
                ("total_minted", models.PositiveIntegerField(default=0)),
                ("vrf_nonce", models.PositiveIntegerField(default=0)),
                ("collected_wei", models.CharField(default="0", max_length=78)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.CreateModel(
            name="FeeTokenBalance",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("address", models.CharField(max_length=42, unique=True)),
                ("balance", models.CharField(default="0", max_length=78)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.CreateModel(
            name="MintEvent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("event_type", models.CharField(db_index=True, max_length=64)),
                ("status", models.CharField(default="ok", max_length=16)),
                ("request_id", models.CharField(blank=True, db_index=True, default="", max_length=66)),
                ("details", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={"ordering": ["-created_at"]},
        ),
        migrations.CreateModel(
            name="MintRequest",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("request_id", models.CharField(max_length=66, unique=True)),
                ("requester", models.CharField(db_index=True, max_length=42)),
                ("payment_wei", models.CharField(max_length=78)),
                (
                    "status",
                    models.CharField(
                        choices=[("requested", "Requested"), ("fulfilled", "Fulfilled"), ("completed", "Completed")],
                        default="requested",
                        max_length=20,
                    ),
                ),
                ("randomness", models.CharField(blank=True, default="", max_length=78)),
                ("token_id", models.PositiveIntegerField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("fulfilled_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "coordinator",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="requests",
                        to="minting.coordinatorstate",
                    ),
                ),
            ],
            options={"ordering": ["-created_at"]},
        ),
        migrations.CreateModel(
            name="Adventurer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("token_id", models.PositiveIntegerField()),
                ("owner", models.CharField(db_index=True, max_length=42)),
                ("adventurer_class", models.CharField(max_length=20)),
                ("strength", models.PositiveSmallIntegerField()),
                ("dexterity", models.PositiveSmallIntegerField()),
                ("constitution", models.PositiveSmallIntegerField()),
                ("intelligence", models.PositiveSmallIntegerField()),
                ("wisdom", models.PositiveSmallIntegerField()),
                ("charisma", models.PositiveSmallIntegerField()),
                ("minted_at", models.DateTimeField(auto_now_add=True)),
                (
                    "coordinator",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="adventurers",
                        to="minting.coordinatorstate",
                    ),
                ),
                (
                    "request",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="adventurer",
                        to="minting.mintrequest",
                    ),
                ),
            ],
            options={
                "ordering": ["token_id"],
                "constraints": [
                    models.UniqueConstraint(fields=("coordinator", "token_id"), name="unique_token_per_coordinator")
                ],
            },
        ),
    ]
