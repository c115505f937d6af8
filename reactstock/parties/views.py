import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, IsAuthenticatedOrReadOnly
from rest_framework.response import Response
from django.shortcuts import get_object_or_404
from reactstock.core.utils import create_audit_log
from reactstock.inventory.services import customer_summary
from .models import Customer, RemovalReason
from .serializers import CustomerSerializer, RemovalReasonSerializer

logger = logging.getLogger('reactstock.parties')


# Customer views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticatedOrReadOnly])
def customer_list_create(request):
    """List customers by name or create a customer"""
    if request.method == 'GET':
        customers = Customer.objects.select_related('role')
        search = request.query_params.get('search')
        if search:
            customers = customers.filter(name__icontains=search)
        return Response(CustomerSerializer(customers, many=True).data)

    serializer = CustomerSerializer(data=request.data)
    if serializer.is_valid():
        customer = serializer.save()
        create_audit_log(request, 'create', 'Customer', customer.id, request.data, object_name=customer.name)
        logger.info(f"Customer '{customer.name}' created by {request.user.username}")
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    logger.warning(f"Customer creation validation failed: {serializer.errors}")
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def customer_detail(request, pk):
    customer = get_object_or_404(Customer.objects.select_related('role'), pk=pk)

    if request.method == 'GET':
        return Response(CustomerSerializer(customer).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CustomerSerializer(customer, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request, 'update', 'Customer', customer.id, request.data, object_name=customer.name)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request, 'delete', 'Customer', customer.id, object_name=customer.name)
    logger.info(f"Customer {pk} deleted by {request.user.username}")
    customer.delete()
    return Response({'message': 'Customer deleted successfully'})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def customer_transactions(request, pk):
    """Item transactions of a customer with consumption summary"""
    customer = get_object_or_404(Customer, pk=pk)
    return Response(customer_summary(customer.pk))


# Removal reason views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticatedOrReadOnly])
def removal_reason_list_create(request):
    if request.method == 'GET':
        return Response(RemovalReasonSerializer(RemovalReason.objects.all(), many=True).data)

    serializer = RemovalReasonSerializer(data=request.data)
    if serializer.is_valid():
        reason = serializer.save()
        create_audit_log(request, 'create', 'RemovalReason', reason.id, request.data, object_name=reason.name)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticatedOrReadOnly])
def removal_reason_detail(request, pk):
    reason = get_object_or_404(RemovalReason, pk=pk)

    if request.method == 'GET':
        return Response(RemovalReasonSerializer(reason).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = RemovalReasonSerializer(reason, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request, 'update', 'RemovalReason', reason.id, request.data, object_name=reason.name)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request, 'delete', 'RemovalReason', reason.id, object_name=reason.name)
    reason.delete()
    return Response({'message': 'Removal reason deleted successfully'})
