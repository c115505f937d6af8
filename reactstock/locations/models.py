from django.db import models


class Location(models.Model):
    """A room, building or area that holds shelves and boxes"""
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    color = models.CharField(max_length=50, blank=True, null=True, help_text="Display color used for boxes in this location")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'locations'
        ordering = ['name']


class Shelf(models.Model):
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    location = models.ForeignKey(Location, on_delete=models.SET_NULL, null=True, blank=True, related_name='shelves')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'shelves'
        ordering = ['name']
        verbose_name_plural = 'shelves'


class Color(models.Model):
    """Named color value available for locations"""
    name = models.CharField(max_length=100)
    value = models.CharField(max_length=50, help_text="CSS color value, e.g. #ff0000")
    description = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.value})"

    class Meta:
        db_table = 'colors'
        ordering = ['name']
