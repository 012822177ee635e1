# taskflow projects/models.py
from django.db import models
from django.conf import settings

DEFAULT_PROJECT_COLOR = '#9b87f5'


class Project(models.Model):
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, default='')
    color = models.CharField(max_length=7, default=DEFAULT_PROJECT_COLOR)
    # No ownership transfer: a project outlives its owner's account
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='owned_projects'
    )
    members = models.ManyToManyField(settings.AUTH_USER_MODEL, related_name='projects', blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['owner'], name='project_owner_idx'),
        ]

    def __str__(self):
        return self.name

    def is_owner(self, user):
        return self.owner_id is not None and self.owner_id == user.pk

    def has_member(self, user):
        return self.members.filter(pk=user.pk).exists()

    def is_accessible_by(self, user):
        return self.is_owner(user) or self.has_member(user)
