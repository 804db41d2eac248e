from django.db import models

# uint256 values do not fit a 64-bit integer column; they are stored as
# decimal strings (balances, randomness) or 0x-prefixed hex (request ids).
UINT256_DIGITS = 78


class CoordinatorState(models.Model):
    address = models.CharField(max_length=42, unique=True)
    total_minted = models.PositiveIntegerField(default=0)
    vrf_nonce = models.PositiveIntegerField(default=0)
    collected_wei = models.CharField(max_length=UINT256_DIGITS, default="0")
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Coordinator {self.address} ({self.total_minted} minted)"


class MintRequest(models.Model):
    STATUS_CHOICES = [
        ("requested", "Requested"),
        ("fulfilled", "Fulfilled"),
        ("completed", "Completed"),
    ]

    coordinator = models.ForeignKey(
        CoordinatorState, related_name="requests", on_delete=models.CASCADE
    )
    request_id = models.CharField(max_length=66, unique=True)
    requester = models.CharField(max_length=42, db_index=True)
    payment_wei = models.CharField(max_length=UINT256_DIGITS)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="requested")
    randomness = models.CharField(max_length=UINT256_DIGITS, blank=True, default="")
    token_id = models.PositiveIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    fulfilled_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Mint request {self.request_id[:10]}... ({self.status})"


class Adventurer(models.Model):
    coordinator = models.ForeignKey(
        CoordinatorState, related_name="adventurers", on_delete=models.CASCADE
    )
    token_id = models.PositiveIntegerField()
    owner = models.CharField(max_length=42, db_index=True)
    request = models.OneToOneField(
        MintRequest, related_name="adventurer", on_delete=models.PROTECT
    )
    adventurer_class = models.CharField(max_length=20)
    strength = models.PositiveSmallIntegerField()
    dexterity = models.PositiveSmallIntegerField()
    constitution = models.PositiveSmallIntegerField()
    intelligence = models.PositiveSmallIntegerField()
    wisdom = models.PositiveSmallIntegerField()
    charisma = models.PositiveSmallIntegerField()
    minted_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["token_id"]
        constraints = [
            models.UniqueConstraint(
                fields=["coordinator", "token_id"], name="unique_token_per_coordinator"
            )
        ]

    def __str__(self):
        return f"Adventurer #{self.token_id} ({self.adventurer_class})"


class FeeTokenBalance(models.Model):
    address = models.CharField(max_length=42, unique=True)
    balance = models.CharField(max_length=UINT256_DIGITS, default="0")
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.address}: {self.balance}"


class MintEvent(models.Model):
    event_type = models.CharField(max_length=64, db_index=True)
    status = models.CharField(max_length=16, default="ok")
    request_id = models.CharField(max_length=66, blank=True, default="", db_index=True)
    details = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.event_type} [{self.status}]"
