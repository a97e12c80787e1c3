"""Request serializers that reject unknown keys.

Every mutation endpoint parses its body with a strict serializer so that
misspelled or unexpected fields fail as ``invalid_argument`` instead of
being silently ignored.
"""

from collections.abc import Mapping

from rest_framework import serializers

from .numbers import MAX_QUANTITY


class StrictFieldsMixin:
    def to_internal_value(self, data):
        if isinstance(data, Mapping):
            unknown = sorted(set(data) - set(self.fields))
            if unknown:
                raise serializers.ValidationError({key: ["Unknown field."] for key in unknown})
        return super().to_internal_value(data)


class StrictSerializer(StrictFieldsMixin, serializers.Serializer):
    pass


class QuantityField(serializers.DecimalField):
    """Decimal bounded by the stock columns; rounding to three places happens in ``common.numbers``."""

    def __init__(self, **kwargs):
        kwargs.setdefault("max_digits", None)
        kwargs.setdefault("decimal_places", None)
        kwargs.setdefault("coerce_to_string", False)
        kwargs.setdefault("max_value", MAX_QUANTITY)
        kwargs.setdefault("min_value", -MAX_QUANTITY)
        super().__init__(**kwargs)
