from django.db import models

DEFAULT_TIME_PERIOD = "Q2 2025"


class Objective(models.Model):
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    time_period = models.CharField(max_length=50, default=DEFAULT_TIME_PERIOD)
    progress = models.FloatField(default=0)
    activity = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.title


class KeyResult(models.Model):
    objective = models.ForeignKey(Objective, on_delete=models.CASCADE, related_name="key_results")
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    start_value = models.FloatField(default=0)
    target_value = models.FloatField()
    progress = models.FloatField(default=0)
    weight = models.FloatField(default=1)
    deadline = models.DateField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["deadline"]

    def __str__(self):
        return f"{self.title} ({self.progress}/{self.target_value})"
