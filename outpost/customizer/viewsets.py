"""
Django REST Framework ViewSet for the logo preview API.

Sessions are not kept between requests: `order_preview` opens a
`CustomizationSession` over the session cart, replays the posted edits and
proceeds within the one request.
"""
import logging

from asgiref.sync import async_to_sync
from rest_framework import status, viewsets
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from .cart import lines_from_cart
from .overlay import OverlayTransform
from .rendering import CompositeRenderer
from .serializers import (
    CompositeRequestSerializer,
    ItemCaptureSerializer,
    OrderPreviewSerializer,
)
from .session import CustomizationSession
from .uploads import LogoUploadForm

logger = logging.getLogger(__name__)


class UnknownLine(Exception):
    def __init__(self, line_id):
        self.line_id = line_id
        super().__init__(line_id)


class CustomizerViewSet(viewsets.ViewSet):
    """
    ViewSet for logo previews.

    Provides:
        - logo: POST /api/customizer/logo/ - check an uploaded logo
        - composite: POST /api/customizer/composite/ - render one preview
        - order_preview: POST /api/customizer/order-preview/ - previews for the cart

    Permissions: open, the cart is read from the visitor's session
    """
    permission_classes = [AllowAny]

    def logo(self, request):
        """
        Validate a logo upload (multipart field ``logo``).

        Returns:
            - 200: {'success': True, 'src', 'notice', 'isVector'}
            - 400: {'success': False, 'error'} with the user-facing reason
        """
        form = LogoUploadForm(request.data, request.FILES)
        if not form.is_valid():
            errors = form.errors.get('logo') or ['Logo file is required.']
            return Response(
                {'success': False, 'error': errors[0]},
                status=status.HTTP_400_BAD_REQUEST
            )

        accepted = form.accepted_logo
        return Response({
            'success': True,
            'src': accepted.data_url,
            'notice': accepted.notice,
            'isVector': accepted.is_vector,
            'width': accepted.width,
            'height': accepted.height,
        })

    def composite(self, request):
        """
        Render one composite.

        Request Body:
            - baseImage: product photo reference
            - transform: {src, x, y, sizePct, rotation, opacity}

        Returns:
            - 200: {'success': True, 'image': data URL or None, 'error'}
              A failed decode is not an HTTP error; the image is just null.
            - 400: validation errors
        """
        serializer = CompositeRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        transform = OverlayTransform.from_wire(serializer.validated_data['transform'])

        renderer = CompositeRenderer()
        result = async_to_sync(renderer.render)(serializer.validated_data['baseImage'], transform)
        return Response({
            'success': True,
            'image': result.image,
            'error': result.error,
        })

    def order_preview(self, request):
        """
        Previews for every cart line the customer opened.

        Request Body:
            - logo: data URL from the logo endpoint, checked again
            - lines: [{lineId, transform?, color?}] applied in order
            - confirmed: colour changes acknowledged (default false)

        Returns:
            - 200: {'success': True, 'captures': [...]}
            - 400: validation errors or unknown lineId
            - 409: {'success': False, 'needsConfirmation': True} when a line's
              preview colour differs from the ordered colour
        """
        serializer = OrderPreviewSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = serializer.validated_data

        lines = lines_from_cart(request.session.get('cart', {}))
        session = CustomizationSession(data['logo'], lines)

        try:
            outcome = async_to_sync(self._run_session)(session, data['lines'], data['confirmed'])
        except UnknownLine as exc:
            logger.info("Order preview referenced unknown cart line %s", exc.line_id)
            return Response(
                {'success': False, 'error': f'Unknown cart line: {exc.line_id}'},
                status=status.HTTP_400_BAD_REQUEST
            )

        if outcome.needs_confirmation:
            return Response({
                'success': False,
                'needsConfirmation': True,
                'error': 'Colour changes only affect the preview. Confirm to continue.',
            }, status=status.HTTP_409_CONFLICT)

        return Response({
            'success': True,
            'captures': ItemCaptureSerializer(outcome.captures, many=True).data,
        })

    @staticmethod
    async def _run_session(session, edits, confirmed):
        for edit in edits:
            try:
                index = session.index_of(edit['lineId'])
            except KeyError:
                raise UnknownLine(edit['lineId']) from None
            await session.select_line(index)
            if 'transform' in edit:
                session.apply_transform(OverlayTransform.from_wire(edit['transform']))
            if 'color' in edit:
                session.set_color_override(edit['color'])
        return await session.proceed(confirmed=confirmed)
