"""
DRF serializers for the customizer API.

Field names follow the JSON the front end already sends (`sizePct`,
`lineId`, ...); range checks mirror `OverlayTransform`.
"""
from rest_framework import serializers

from .overlay import (
    DEFAULT_OPACITY,
    DEFAULT_POSITION,
    DEFAULT_ROTATION,
    DEFAULT_SCALE_PCT,
)
from .uploads import LogoRejected, accept_logo_reference


class OverlayTransformSerializer(serializers.Serializer):
    """
    Overlay transform in wire format.

    Fields:
        - src: logo reference (optional, the session logo is used otherwise)
        - x, y: centre in percent of the container
        - sizePct: width in percent of the container
        - rotation: degrees, clockwise
        - opacity: 0..1
    """
    src = serializers.CharField(required=False, allow_blank=True, default='')
    x = serializers.FloatField(min_value=0, max_value=100, default=DEFAULT_POSITION[0])
    y = serializers.FloatField(min_value=0, max_value=100, default=DEFAULT_POSITION[1])
    sizePct = serializers.FloatField(min_value=0, max_value=100, default=DEFAULT_SCALE_PCT)
    rotation = serializers.FloatField(min_value=-180, max_value=180, default=DEFAULT_ROTATION)
    opacity = serializers.FloatField(min_value=0, max_value=1, default=DEFAULT_OPACITY)

    def validate_sizePct(self, value):
        if value <= 0:
            raise serializers.ValidationError("sizePct must be greater than 0")
        return value


class CompositeRequestSerializer(serializers.Serializer):
    """
    One composite render.

    Fields:
        - baseImage: product photo reference
        - transform: overlay transform (its src is the logo)
    """
    baseImage = serializers.CharField()
    transform = OverlayTransformSerializer()

    def validate_transform(self, value):
        if not value.get('src'):
            raise serializers.ValidationError("transform.src is required")
        try:
            accept_logo_reference(value['src'])
        except LogoRejected as exc:
            raise serializers.ValidationError(exc.message)
        return value


class LineEditSerializer(serializers.Serializer):
    lineId = serializers.CharField()
    transform = OverlayTransformSerializer(required=False)
    color = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class OrderPreviewSerializer(serializers.Serializer):
    """
    Drive a customization session over the session cart.

    Fields:
        - logo: data URL returned by the logo endpoint, checked again here
        - lines: per-line edits, applied in the given order
        - confirmed: customer acknowledged preview-only colour changes
    """
    logo = serializers.CharField()
    lines = LineEditSerializer(many=True, required=False, default=list)
    confirmed = serializers.BooleanField(required=False, default=False)

    def validate_logo(self, value):
        try:
            return accept_logo_reference(value).data_url
        except LogoRejected as exc:
            raise serializers.ValidationError(exc.message)


class ItemCaptureSerializer(serializers.Serializer):
    lineId = serializers.CharField(source='line_id')
    productName = serializers.CharField(source='product_name')
    selectedColor = serializers.CharField(source='selected_color')
    colorChanged = serializers.BooleanField(source='color_changed')
    originalColor = serializers.CharField(source='original_color')
    transform = serializers.SerializerMethodField()
    previewImage = serializers.CharField(source='preview_image', allow_null=True)

    def get_transform(self, capture):
        return capture.to_wire()['transform']
