"""
URL configuration for the compliance app.

HOS log, driver status and violation endpoints.
"""

from django.urls import path
from .views import (
    # HOS Logs
    HOSLogListCreateView,
    HOSLogDetailView,

    # Driver Status
    DriverHOSStatusView,

    # Violations
    HOSViolationListView,
    HOSViolationDetailView,

    # HOS Config
    HOSConfigView,
)

app_name = 'compliance'

urlpatterns = [
    # GET /api/hos/logs/ - List logs with totals
    # POST /api/hos/logs/ - Create a log
    path('logs/', HOSLogListCreateView.as_view(), name='log_list_create'),

    # GET/PATCH/DELETE /api/hos/logs/{id}/
    path('logs/<uuid:log_id>/', HOSLogDetailView.as_view(), name='log_detail'),

    # GET/POST /api/hos/drivers/{driver_id}/status/
    path('drivers/<str:driver_id>/status/', DriverHOSStatusView.as_view(), name='driver_status'),

    # GET /api/hos/violations/
    path('violations/', HOSViolationListView.as_view(), name='violation_list'),

    # GET/PATCH /api/hos/violations/{id}/
    path('violations/<uuid:violation_id>/', HOSViolationDetailView.as_view(), name='violation_detail'),

    # GET /api/hos/config/
    path('config/', HOSConfigView.as_view(), name='config'),
]
