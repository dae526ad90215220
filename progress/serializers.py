# progress/serializers.py
import datetime as dt

from django.utils import timezone
from rest_framework import serializers


class AwareDateTimeField(serializers.DateTimeField):
    """
    Datetime field that ensures tz-aware UTC datetimes.
    Naive values are taken as UTC; output is always ISO in UTC (Z).
    """
    def to_representation(self, value):
        if value is None:
            return None
        if timezone.is_naive(value):
            value = timezone.make_aware(value, dt.timezone.utc)
        return super().to_representation(value.astimezone(dt.timezone.utc))


class ScreenshotSerializer(serializers.Serializer):
    """
    Payload of POST /api/word-progress/screenshot.
    The four identity fields are required; range ordering is checked by IdentityKey.
    """
    arabic = serializers.CharField(trim_whitespace=False)
    translation = serializers.CharField(trim_whitespace=False)
    root = serializers.CharField(required=False, allow_null=True, allow_blank=True, default=None)
    surah = serializers.IntegerField(min_value=1)
    ayah = serializers.IntegerField(min_value=1)
    startWordIndex = serializers.IntegerField(min_value=1)
    endWordIndex = serializers.IntegerField(min_value=1)


class ProgressRecordSerializer(serializers.Serializer):
    """Read-only wire shape of a ProgressRecord (same keys as the stored document)."""
    arabic = serializers.CharField(read_only=True)
    translation = serializers.CharField(read_only=True)
    root = serializers.CharField(read_only=True, allow_null=True)
    surah = serializers.IntegerField(source="identity.surah", read_only=True)
    ayah = serializers.IntegerField(source="identity.ayah", read_only=True)
    startWordIndex = serializers.IntegerField(source="identity.start_word_index", read_only=True)
    endWordIndex = serializers.IntegerField(source="identity.end_word_index", read_only=True)
    known = serializers.BooleanField(read_only=True)
    bookmarked = serializers.BooleanField(read_only=True)
    numOfScreenshots = serializers.IntegerField(source="screenshot_count", read_only=True)
    dateLastAdded = AwareDateTimeField(source="last_updated", read_only=True, allow_null=True)
