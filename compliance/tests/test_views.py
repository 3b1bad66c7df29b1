"""
Tests for HOS Compliance API Views.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from django.core.cache import cache
from django.test import TestCase
from rest_framework.test import APIClient
from rest_framework import status

from compliance.models import HOSLog, HOSEntry, HOSViolationRecord


NOW = datetime(2024, 1, 15, 18, 0, 0, tzinfo=timezone.utc)
MIDNIGHT = datetime(2024, 1, 15, 0, 0, 0, tzinfo=timezone.utc)


def pin_clock(test_case, now=NOW):
    """Freeze django.utils.timezone.now for the rest of the test."""
    patcher = patch('django.utils.timezone.now', return_value=now)
    patcher.start()
    test_case.addCleanup(patcher.stop)


def log_payload(driver_id, hours, duty_status='driving'):
    """A log of back-to-back hourly entries starting at MIDNIGHT."""
    return {
        'driver_id': driver_id,
        'date': MIDNIGHT.date().isoformat(),
        'logs': [
            {
                'status': duty_status,
                'start_time': (MIDNIGHT + timedelta(hours=i)).isoformat(),
                'end_time': (MIDNIGHT + timedelta(hours=i + 1)).isoformat(),
                'location': 'Chicago, IL',
            }
            for i in range(hours)
        ],
    }


def store_unusable_log(driver_id):
    """A log whose entry carries a status the calculator does not know."""
    log = HOSLog.objects.create(driver_id=driver_id, log_date=MIDNIGHT.date())
    HOSEntry.objects.create(
        log=log,
        status='napping',
        start_time=MIDNIGHT,
        end_time=MIDNIGHT + timedelta(hours=1),
        location='Chicago, IL',
    )
    return log


class TestHealthCheckEndpoint(TestCase):
    """Test health check endpoint."""

    def setUp(self):
        self.client = APIClient()

    def test_health_check_returns_200(self):
        """Test that health check returns 200 OK."""
        response = self.client.get('/api/health/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'healthy'
        assert 'version' in response.data
        assert 'timestamp' in response.data


class TestApiRootEndpoint(TestCase):
    """Test API root endpoint."""

    def setUp(self):
        self.client = APIClient()

    def test_api_root_returns_endpoints(self):
        """Test that API root lists available endpoints."""
        response = self.client.get('/api/')

        assert response.status_code == status.HTTP_200_OK
        assert 'endpoints' in response.data
        assert 'health' in response.data['endpoints']
        assert 'driver_status' in response.data['endpoints']


class TestHOSConfigEndpoint(TestCase):

    def setUp(self):
        self.client = APIClient()

    def test_config_lists_limits(self):
        response = self.client.get('/api/hos/config/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['limits']['max_driving_minutes'] == 660
        assert response.data['limits']['cycle_minutes'] == 4200


class TestHOSLogEndpoints(TestCase):
    """Test HOS log CRUD."""

    def setUp(self):
        cache.clear()
        pin_clock(self)
        self.client = APIClient()

    def test_create_log(self):
        response = self.client.post('/api/hos/logs/', log_payload('d1', 3), format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['driver_id'] == 'd1'
        assert len(response.data['entries']) == 3
        assert response.data['entries'][0]['duration_minutes'] == 60
        assert HOSLog.objects.filter(driver_id='d1').count() == 1

    def test_create_log_missing_fields(self):
        response = self.client.post('/api/hos/logs/', {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'error' in response.data
        assert 'driver_id' in response.data['details']

    def test_create_log_requires_entries(self):
        payload = {**log_payload('d1', 0)}
        response = self.client.post('/api/hos/logs/', payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'logs' in response.data['details']

    def test_create_log_rejects_unknown_status(self):
        payload = log_payload('d1', 1)
        payload['logs'][0]['status'] = 'napping'
        response = self.client.post('/api/hos/logs/', payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_create_log_rejects_bad_timestamp(self):
        payload = log_payload('d1', 1)
        payload['logs'][0]['start_time'] = 'not a time'
        response = self.client.post('/api/hos/logs/', payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_list_logs_with_totals(self):
        self.client.post('/api/hos/logs/', log_payload('d1', 12), format='json')
        self.client.post('/api/hos/logs/', log_payload('d2', 2), format='json')

        response = self.client.get('/api/hos/logs/', {'driver_id': 'd1'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['pagination']['total_count'] == 1
        log = response.data['logs'][0]
        assert log['total_drive_time'] == 720
        assert log['violations'][0]['type'] == '11_hour'

    def test_list_logs_invalid_limit(self):
        response = self.client.get('/api/hos/logs/', {'limit': 500})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_log_detail_update_delete(self):
        created = self.client.post('/api/hos/logs/', log_payload('d1', 2), format='json')
        url = f"/api/hos/logs/{created.data['id']}/"

        response = self.client.get(url)
        assert response.status_code == status.HTTP_200_OK
        assert response.data['totals']['total_drive_time'] == 120

        response = self.client.patch(url, {'certified_by': 'safety-manager'}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['certified_by'] == 'safety-manager'
        assert response.data['certified_at'] is not None

        response = self.client.delete(url)
        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not HOSLog.objects.exists()

    def test_list_logs_with_unusable_entry(self):
        store_unusable_log('d1')

        response = self.client.get('/api/hos/logs/', {'driver_id': 'd1'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'HOS log summary failed'
        assert 'napping' in response.data['details']

    def test_log_detail_with_unusable_entry(self):
        log = store_unusable_log('d1')

        response = self.client.get(f'/api/hos/logs/{log.id}/')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'HOS log summary failed'

    def test_missing_log_returns_404(self):
        response = self.client.get('/api/hos/logs/00000000-0000-0000-0000-000000000000/')
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestDriverStatusEndpoint(TestCase):
    """Test driver HOS status endpoint."""

    def setUp(self):
        cache.clear()
        pin_clock(self)
        self.client = APIClient()

    def test_pending_without_logs(self):
        response = self.client.get('/api/hos/drivers/d1/status/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['compliance_status'] == 'pending'
        assert response.data['available_drive_time'] == 660
        assert response.data['last_logged_at'] is None

    def test_compliant_driver(self):
        self.client.post('/api/hos/logs/', log_payload('d1', 10), format='json')

        response = self.client.get('/api/hos/drivers/d1/status/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['compliance_status'] == 'compliant'
        assert response.data['used_drive_time'] == 600
        assert response.data['available_drive_time'] == 60
        assert response.data['violations'] == []

    def test_recalculate_records_violations(self):
        self.client.post('/api/hos/logs/', log_payload('d1', 12), format='json')

        response = self.client.post('/api/hos/drivers/d1/status/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['compliance_status'] == 'violation'
        assert len(response.data['recorded_violations']) == 2
        assert HOSViolationRecord.objects.filter(driver_id='d1', violation_type='11_hour').count() == 2

    def test_recalculating_twice_keeps_one_record_per_violation(self):
        self.client.post('/api/hos/logs/', log_payload('d1', 12), format='json')

        first = self.client.post('/api/hos/drivers/d1/status/')
        second = self.client.post('/api/hos/drivers/d1/status/')

        assert second.status_code == status.HTTP_200_OK
        assert HOSViolationRecord.objects.filter(driver_id='d1').count() == 2
        assert {v['id'] for v in second.data['recorded_violations']} == \
            {v['id'] for v in first.data['recorded_violations']}

    def test_resolved_violation_is_recorded_again(self):
        self.client.post('/api/hos/logs/', log_payload('d1', 12), format='json')
        self.client.post('/api/hos/drivers/d1/status/')
        HOSViolationRecord.objects.filter(driver_id='d1').update(resolved=True)

        self.client.post('/api/hos/drivers/d1/status/')

        assert HOSViolationRecord.objects.filter(driver_id='d1', resolved=False).count() == 2
        assert HOSViolationRecord.objects.filter(driver_id='d1').count() == 4


class TestViolationEndpoints(TestCase):
    """Test violation listing and resolution."""

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        pin_clock(self)
        self.open_major = HOSViolationRecord.objects.create(
            driver_id='d1', violation_type='11_hour',
            description='Exceeded 11-hour driving limit', severity='major', detected_at=NOW,
        )
        HOSViolationRecord.objects.create(
            driver_id='d2', violation_type='70_hour',
            description='Exceeded 70-hour 8-day limit', severity='critical', detected_at=NOW,
        )
        HOSViolationRecord.objects.create(
            driver_id='d1', violation_type='14_hour',
            description='Exceeded 14-hour on-duty limit', severity='major',
            detected_at=NOW, resolved=True,
        )

    def test_list_open_violations(self):
        response = self.client.get('/api/hos/violations/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['pagination']['total_count'] == 2
        assert all(v['status'] == 'open' for v in response.data['violations'])

    def test_filter_by_driver_and_severity(self):
        response = self.client.get('/api/hos/violations/', {'driver_id': 'd1', 'severity': 'major'})

        assert response.status_code == status.HTTP_200_OK
        assert [v['violation_type'] for v in response.data['violations']] == ['11_hour']

    def test_list_resolved_violations(self):
        response = self.client.get('/api/hos/violations/', {'resolved': 'true'})

        assert response.data['pagination']['total_count'] == 1
        assert response.data['violations'][0]['violation_type'] == '14_hour'

    def test_resolve_violation(self):
        url = f'/api/hos/violations/{self.open_major.id}/'
        response = self.client.patch(url, {'resolution_notes': 'Driver retrained'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['resolved'] is True
        assert response.data['status'] == 'resolved'
        self.open_major.refresh_from_db()
        assert self.open_major.resolution_notes == 'Driver retrained'


@pytest.mark.parametrize('payload, is_valid', [
    ({'status': 'driving', 'start_time': '2024-01-15T06:00:00Z',
      'end_time': '2024-01-15T07:00:00Z', 'location': 'A'}, True),
    ({'status': 'driving', 'start_time': '2024-01-15T06:00:00Z',
      'end_time': '2024-01-15T07:00:00Z', 'location': 'A', 'odometer': -1}, False),
    ({'status': 'driving', 'start_time': '2024-01-15T06:00:00Z',
      'end_time': '2024-01-15T07:00:00Z'}, False),
    ({'status': 'driving', 'start_time': '2024-01-15T06:00:00Z',
      'end_time': '2024-01-15T07:00:00Z', 'location': 'A', 'source': 'fax'}, False),
])
def test_entry_input_serializer(payload, is_valid):
    from compliance.serializers import HOSEntryInputSerializer

    serializer = HOSEntryInputSerializer(data=payload)
    assert serializer.is_valid() is is_valid
