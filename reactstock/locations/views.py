import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, IsAuthenticatedOrReadOnly
from django.shortcuts import get_object_or_404
from reactstock.core.utils import create_audit_log, parse_optional_int
from .models import Location, Shelf, Color
from .serializers import LocationSerializer, ShelfSerializer, ColorSerializer

logger = logging.getLogger('reactstock.locations')


def _update(request, instance, serializer_class, model_name):
    serializer = serializer_class(instance, data=request.data, partial=request.method == 'PATCH')
    if serializer.is_valid():
        serializer.save()
        create_audit_log(request, 'update', model_name, instance.pk, request.data, object_name=str(instance))
        logger.info(f"{model_name} {instance.pk} updated by {request.user.username}")
        return Response(serializer.data)
    logger.warning(f"{model_name} update validation failed: {serializer.errors}")
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


def _create(request, serializer_class, model_name):
    serializer = serializer_class(data=request.data)
    if serializer.is_valid():
        instance = serializer.save()
        create_audit_log(request, 'create', model_name, instance.pk, request.data, object_name=str(instance))
        logger.info(f"{model_name} '{instance}' created by {request.user.username}")
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    logger.warning(f"{model_name} creation validation failed: {serializer.errors}")
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


def _delete(request, instance, model_name):
    logger.info(f"User {request.user.username} deleting {model_name} {instance.pk} ({instance})")
    create_audit_log(request, 'delete', model_name, instance.pk, object_name=str(instance))
    instance.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


# Location views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticatedOrReadOnly])
def location_list_create(request):
    """List all locations or create a new location"""
    if request.method == 'GET':
        serializer = LocationSerializer(Location.objects.all(), many=True)
        return Response(serializer.data)
    return _create(request, LocationSerializer, 'Location')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def location_detail(request, pk):
    """Retrieve, update or delete a location"""
    location = get_object_or_404(Location, pk=pk)

    if request.method == 'GET':
        return Response(LocationSerializer(location).data)
    elif request.method in ('PUT', 'PATCH'):
        return _update(request, location, LocationSerializer, 'Location')
    return _delete(request, location, 'Location')


# Shelf views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticatedOrReadOnly])
def shelf_list_create(request):
    """List shelves (optionally for one location) or create a shelf"""
    if request.method == 'GET':
        shelves = Shelf.objects.select_related('location')
        try:
            location_id = parse_optional_int(request.query_params.get('location_id'))
        except ValueError:
            return Response({'error': 'location_id must be an integer'}, status=status.HTTP_400_BAD_REQUEST)
        if location_id is not None:
            shelves = shelves.filter(location_id=location_id)
        return Response(ShelfSerializer(shelves, many=True).data)
    return _create(request, ShelfSerializer, 'Shelf')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def shelf_detail(request, pk):
    """Retrieve, update or delete a shelf"""
    shelf = get_object_or_404(Shelf.objects.select_related('location'), pk=pk)

    if request.method == 'GET':
        return Response(ShelfSerializer(shelf).data)
    elif request.method in ('PUT', 'PATCH'):
        return _update(request, shelf, ShelfSerializer, 'Shelf')
    return _delete(request, shelf, 'Shelf')


# Color views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticatedOrReadOnly])
def color_list_create(request):
    if request.method == 'GET':
        return Response(ColorSerializer(Color.objects.all(), many=True).data)
    return _create(request, ColorSerializer, 'Color')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def color_detail(request, pk):
    color = get_object_or_404(Color, pk=pk)

    if request.method == 'GET':
        return Response(ColorSerializer(color).data)
    elif request.method in ('PUT', 'PATCH'):
        return _update(request, color, ColorSerializer, 'Color')
    return _delete(request, color, 'Color')
