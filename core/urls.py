"""
URL configuration for the HOS Compliance project.

API URL structure:
- /api/ - API root
- /api/health/ - Health check
- /api/hos/logs/ - HOS log storage
- /api/hos/drivers/{driver_id}/status/ - Driver HOS status
- /api/hos/violations/ - Recorded violations
- /api/hos/config/ - HOS limits
"""

from django.contrib import admin
from django.urls import path, include
from compliance.views import HealthCheckView, api_root

urlpatterns = [
    # Admin
    path('admin/', admin.site.urls),

    # API root - Documentation
    path('api/', api_root, name='api_root'),

    # Health check endpoint
    path('api/health/', HealthCheckView.as_view(), name='health_check'),

    # ==========================================================================
    # HOS Compliance
    # ==========================================================================
    path('api/hos/', include('compliance.urls', namespace='compliance')),
]
