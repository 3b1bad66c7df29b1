"""
HOS Compliance API Views.

REST API for driver Hours of Service compliance:
- Health check
- HOS log storage (CRUD)
- Driver HOS status
- Violation review
- HOS configuration
"""

import logging
from dataclasses import asdict
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.decorators import api_view

from .models import HOSLog, HOSViolationRecord
from .serializers import (
    HOSLogInputSerializer,
    HOSLogUpdateSerializer,
    HOSLogFilterSerializer,
    HOSLogModelSerializer,
    HOSViolationFilterSerializer,
    HOSViolationResolveSerializer,
    HOSViolationRecordSerializer,
    HealthCheckSerializer,
)
from .services import HOSLogService
from .services.hos_service import HOSConfig
from .services.log_service import HOSServiceError, paginate

logger = logging.getLogger(__name__)


def validation_error(serializer):
    return Response(
        {'error': 'Validation failed', 'details': serializer.errors},
        status=status.HTTP_400_BAD_REQUEST
    )


class HealthCheckView(APIView):
    """
    Health check endpoint for monitoring and load balancers.

    GET /api/health/
    """

    def get(self, request):
        """Return health status of the API."""
        data = {
            'status': 'healthy',
            'message': 'HOS Compliance API is running',
            'version': '1.0.0',
            'timestamp': timezone.now()
        }
        serializer = HealthCheckSerializer(data)
        return Response(serializer.data, status=status.HTTP_200_OK)


# =============================================================================
# HOS Logs - CRUD for /api/hos/logs/
# =============================================================================

class HOSLogListCreateView(APIView):
    """
    GET /api/hos/logs/ - List logs with per-log duty totals
    POST /api/hos/logs/ - Store a new log
    """

    def get(self, request):
        """List logs, optionally filtered by driver and status."""
        filters = HOSLogFilterSerializer(data=request.query_params)
        if not filters.is_valid():
            return validation_error(filters)
        params = filters.validated_data

        logs = HOSLog.objects.prefetch_related('entries').order_by('-log_date', '-created_at')
        if params.get('driver_id'):
            logs = logs.filter(driver_id=params['driver_id'])
        if params.get('status'):
            logs = logs.filter(status=params['status'])

        page_items, pagination = paginate(logs, params['page'], params['limit'])

        service = HOSLogService()
        results = []
        for log in page_items:
            try:
                totals = service.summarize_log(log)
            except HOSServiceError as e:
                logger.error(f"HOS log summary failed for log {log.id}: {e}")
                return Response(
                    {'error': 'HOS log summary failed', 'details': str(e)},
                    status=status.HTTP_400_BAD_REQUEST
                )
            results.append({
                'id': str(log.id),
                'driver_id': log.driver_id,
                'date': log.log_date.isoformat(),
                'status': log.status,
                'certified_by': log.certified_by,
                'certified_at': log.certified_at.isoformat() if log.certified_at else None,
                'notes': log.notes,
                **totals,
            })

        return Response({'logs': results, 'pagination': pagination}, status=status.HTTP_200_OK)

    def post(self, request):
        """
        Create an HOS log.

        Request:
        {
            "driver_id": "d1",
            "date": "2024-01-15",
            "logs": [
                {
                    "status": "driving",
                    "start_time": "2024-01-15T06:00:00Z",
                    "end_time": "2024-01-15T10:00:00Z",
                    "location": "Chicago, IL"
                }
            ]
        }
        """
        serializer = HOSLogInputSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error(serializer)

        try:
            log = HOSLogService().create_log(serializer.validated_data)
        except Exception as e:
            logger.exception(f"HOS log creation failed: {e}")
            return Response(
                {'error': 'HOS log creation failed', 'details': str(e)},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        return Response(HOSLogModelSerializer(log).data, status=status.HTTP_201_CREATED)


class HOSLogDetailView(APIView):
    """
    GET/PATCH/DELETE /api/hos/logs/{id}/
    """

    def get(self, request, log_id):
        log = get_object_or_404(HOSLog.objects.prefetch_related('entries'), id=log_id)
        try:
            totals = HOSLogService().summarize_log(log)
        except HOSServiceError as e:
            logger.error(f"HOS log summary failed for log {log_id}: {e}")
            return Response(
                {'error': 'HOS log summary failed', 'details': str(e)},
                status=status.HTTP_400_BAD_REQUEST
            )

        data = HOSLogModelSerializer(log).data
        data['totals'] = totals
        return Response(data, status=status.HTTP_200_OK)

    def patch(self, request, log_id):
        """Update status, notes or certification."""
        log = get_object_or_404(HOSLog, id=log_id)
        serializer = HOSLogUpdateSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return validation_error(serializer)

        log = HOSLogService().update_log(log, serializer.validated_data)
        return Response(HOSLogModelSerializer(log).data, status=status.HTTP_200_OK)

    def delete(self, request, log_id):
        log = get_object_or_404(HOSLog, id=log_id)
        HOSLogService().delete_log(log)
        return Response(
            {'message': f'HOS log {log_id} deleted'},
            status=status.HTTP_204_NO_CONTENT
        )


# =============================================================================
# Driver HOS Status
# =============================================================================

class DriverHOSStatusView(APIView):
    """
    GET /api/hos/drivers/{driver_id}/status/ - Current status (cached)
    POST /api/hos/drivers/{driver_id}/status/ - Recalculate and record violations
    """

    def get(self, request, driver_id):
        try:
            data = HOSLogService().get_driver_status(driver_id)
        except HOSServiceError as e:
            logger.error(f"HOS status calculation failed for driver {driver_id}: {e}")
            return Response(
                {'error': 'HOS status calculation failed', 'details': str(e)},
                status=status.HTTP_400_BAD_REQUEST
            )
        return Response(data, status=status.HTTP_200_OK)

    def post(self, request, driver_id):
        service = HOSLogService()
        try:
            hos_status = service.calculate_driver_status(driver_id)
        except HOSServiceError as e:
            logger.error(f"HOS status calculation failed for driver {driver_id}: {e}")
            return Response(
                {'error': 'HOS status calculation failed', 'details': str(e)},
                status=status.HTTP_400_BAD_REQUEST
            )

        records = service.record_violations(hos_status)
        data = hos_status.to_dict()
        service.invalidate_status(driver_id)

        return Response({
            **data,
            'recorded_violations': HOSViolationRecordSerializer(records, many=True).data,
        }, status=status.HTTP_200_OK)


# =============================================================================
# HOS Violations
# =============================================================================

class HOSViolationListView(APIView):
    """
    GET /api/hos/violations/
    """

    def get(self, request):
        filters = HOSViolationFilterSerializer(data=request.query_params)
        if not filters.is_valid():
            return validation_error(filters)
        params = filters.validated_data

        violations = HOSViolationRecord.objects.filter(resolved=params['resolved'])
        if params.get('driver_id'):
            violations = violations.filter(driver_id=params['driver_id'])
        if params.get('severity'):
            violations = violations.filter(severity__in=params['severity'])

        page_items, pagination = paginate(violations, params['page'], params['limit'])
        return Response({
            'violations': HOSViolationRecordSerializer(page_items, many=True).data,
            'pagination': pagination,
        }, status=status.HTTP_200_OK)


class HOSViolationDetailView(APIView):
    """
    GET /api/hos/violations/{id}/
    PATCH /api/hos/violations/{id}/ - Mark resolved
    """

    def get(self, request, violation_id):
        record = get_object_or_404(HOSViolationRecord, id=violation_id)
        return Response(HOSViolationRecordSerializer(record).data, status=status.HTTP_200_OK)

    def patch(self, request, violation_id):
        record = get_object_or_404(HOSViolationRecord, id=violation_id)
        serializer = HOSViolationResolveSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error(serializer)

        record = HOSLogService().resolve_violation(
            record, serializer.validated_data['resolution_notes']
        )
        return Response(HOSViolationRecordSerializer(record).data, status=status.HTTP_200_OK)


# =============================================================================
# HOS Configuration
# =============================================================================

class HOSConfigView(APIView):
    """
    GET /api/hos/config/ - HOS limits used by status calculations
    """

    def get(self, request):
        config = HOSConfig()
        return Response({
            'limits': asdict(config),
            'units': 'minutes',
            'assumptions': [
                'Property-carrying driver (not passenger)',
                '"Today" is the current UTC calendar day',
                'Cycle usage covers the trailing 7 days',
                '34 consecutive hours off duty or in the sleeper berth allow a restart',
            ]
        }, status=status.HTTP_200_OK)


@api_view(['GET'])
def api_root(request):
    """
    API root - lists available endpoints.
    """
    return Response({
        'name': 'HOS Compliance API',
        'version': '1.0.0',
        'endpoints': {
            'health': '/api/health/',
            'config': '/api/hos/config/',
            'logs': '/api/hos/logs/',
            'log_detail': '/api/hos/logs/{id}/',
            'driver_status': '/api/hos/drivers/{driver_id}/status/',
            'violations': '/api/hos/violations/',
            'violation_detail': '/api/hos/violations/{id}/',
        }
    })
