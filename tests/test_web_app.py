"""Unit tests for web application."""

import unittest
import io
import tempfile
import shutil
from unittest.mock import Mock
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from catpoint_security.config_manager import ConfigManager
from catpoint_security.models.sensor import Sensor, SensorType
from catpoint_security.models.status import AlarmStatus, ArmingStatus
from catpoint_security.services.error_handler import AnalysisFailure, ErrorHandler
from catpoint_security.services.image_service import FakeImageService
from catpoint_security.services.interfaces import ImageServiceInterface
from catpoint_security.services.repository import InMemorySecurityRepository
from catpoint_security.services.security_service import SecurityService
from catpoint_security.web.app import SecurityWebApp, build_web_app, create_app


class TestSecurityWebApp(unittest.TestCase):
    """Test cases for SecurityWebApp."""

    def setUp(self):
        """Set up test fixtures."""
        self.repository = InMemorySecurityRepository()
        self.image_service = Mock(spec=ImageServiceInterface)
        self.image_service.image_contains_cat.return_value = True
        self.service = SecurityService(self.repository, self.image_service,
                                       error_handler=ErrorHandler())

        self.web_app = SecurityWebApp(self.service)
        self.web_app.app.config['TESTING'] = True
        self.client = self.web_app.app.test_client()

    def _add_door(self):
        return self.client.post('/api/sensors', json={"name": "front", "type": "door"})

    def test_status(self):
        """Status endpoint reports the system snapshot."""
        response = self.client.get('/api/status')

        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertTrue(data['success'])
        self.assertEqual(data['data']['alarm_status'], 'NO_ALARM')
        self.assertEqual(data['data']['arming_status'], 'DISARMED')

    def test_add_and_list_sensors(self):
        """Sensors can be created and listed."""
        response = self._add_door()
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.get_json()['data'], {"name": "front", "type": "DOOR", "active": False})

        listed = self.client.get('/api/sensors').get_json()['data']
        self.assertEqual(listed, [{"name": "front", "type": "DOOR", "active": False}])

    def test_add_sensor_validation(self):
        """Missing names or unknown types are rejected."""
        for payload in ({"type": "door"}, {"name": "x", "type": "laser"}, None):
            with self.subTest(payload=payload):
                response = self.client.post('/api/sensors', json=payload)
                self.assertEqual(response.status_code, 400)
                self.assertFalse(response.get_json()['success'])

    def test_remove_sensor(self):
        """Sensors can be removed; unknown sensors give 404."""
        self._add_door()

        response = self.client.delete('/api/sensors/DOOR/front')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.service.get_sensors(), set())

        response = self.client.delete('/api/sensors/DOOR/front')
        self.assertEqual(response.status_code, 404)

    def test_arming(self):
        """Arming status changes through the API."""
        response = self.client.post('/api/arming', json={"status": "armed_away"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.repository.get_arming_status(), ArmingStatus.ARMED_AWAY)

    def test_arming_rejects_unknown_status(self):
        """Unknown arming names give 400."""
        response = self.client.post('/api/arming', json={"status": "ARMED_MOON"})
        self.assertEqual(response.status_code, 400)

    def test_sensor_activation_escalates(self):
        """Activating a sensor while armed moves to pending."""
        self._add_door()
        self.client.post('/api/arming', json={"status": "ARMED_HOME"})

        response = self.client.post('/api/sensors/door/front/activation', json={"active": True})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['data']['alarm_status'], 'PENDING_ALARM')
        self.assertEqual(self.repository.get_alarm_status(), AlarmStatus.PENDING_ALARM)

    def test_sensor_activation_validation(self):
        """Unknown sensors give 404 and non-boolean flags give 400."""
        response = self.client.post('/api/sensors/door/nowhere/activation', json={"active": True})
        self.assertEqual(response.status_code, 404)

        self._add_door()
        response = self.client.post('/api/sensors/door/front/activation', json={"active": "yes"})
        self.assertEqual(response.status_code, 400)

    def test_image_upload_triggers_alarm(self):
        """A cat in an uploaded image while armed home raises the alarm."""
        self.client.post('/api/arming', json={"status": "ARMED_HOME"})

        response = self.client.post(
            '/api/image',
            data={'image': (io.BytesIO(b"jpeg bytes"), 'cat.jpg')},
            content_type='multipart/form-data'
        )

        self.assertEqual(response.status_code, 200)
        data = response.get_json()['data']
        self.assertTrue(data['cat_detected'])
        self.assertEqual(data['status']['alarm_status'], 'ALARM')
        self.image_service.image_contains_cat.assert_called_once_with(
            b"jpeg bytes", self.service.confidence_threshold
        )

    def test_image_raw_body(self):
        """Raw request bodies are accepted as images."""
        response = self.client.post('/api/image', data=b"raw bytes",
                                    content_type='application/octet-stream')
        self.assertEqual(response.status_code, 200)

    def test_image_missing(self):
        """Requests without image data give 400."""
        response = self.client.post('/api/image')
        self.assertEqual(response.status_code, 400)

    def test_image_analysis_failure(self):
        """Analyzer failures give 422 and leave the alarm untouched."""
        self.repository.set_alarm_status(AlarmStatus.PENDING_ALARM)
        self.image_service.image_contains_cat.side_effect = AnalysisFailure("unreadable")

        response = self.client.post('/api/image', data=b"garbage",
                                    content_type='application/octet-stream')

        self.assertEqual(response.status_code, 422)
        self.assertEqual(self.repository.get_alarm_status(), AlarmStatus.PENDING_ALARM)

    def test_events(self):
        """Listener events are exposed through the API."""
        self.client.post('/api/arming', json={"status": "DISARMED"})

        events = self.client.get('/api/events').get_json()['data']
        self.assertEqual(events[-1]['event'], 'alarm_status')
        self.assertEqual(events[-1]['value'], 'NO_ALARM')

        limited = self.client.get('/api/events?limit=0').get_json()['data']
        self.assertEqual(limited, [])

    def test_clear_events(self):
        """The event log can be cleared through the API."""
        self.client.post('/api/arming', json={"status": "DISARMED"})

        response = self.client.delete('/api/events')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.client.get('/api/events').get_json()['data'], [])

    def test_health_reports_recorded_failures(self):
        """Analyzer failures show up in the health report until reset."""
        healthy = self.client.get('/api/health').get_json()['data']
        self.assertEqual(healthy['status'], 'healthy')
        self.assertEqual(healthy['errors']['total_errors'], 0)

        self.image_service.image_contains_cat.side_effect = RuntimeError("camera offline")
        self.client.post('/api/image', data=b"frame", content_type='application/octet-stream')

        data = self.client.get('/api/health').get_json()['data']
        self.assertEqual(data['status'], 'degraded')
        self.assertEqual(data['components']['image_service'], 'degraded')
        self.assertEqual(data['errors']['component_error_counts']['image_service'], 1)
        self.assertEqual(data['summary']['total_errors'], 1)

        response = self.client.post('/api/health/reset', json={})
        self.assertEqual(response.status_code, 200)

        data = self.client.get('/api/health').get_json()['data']
        self.assertEqual(data['status'], 'healthy')
        self.assertEqual(data['errors']['total_errors'], 0)

    def test_health_reset_single_component(self):
        """Resetting one component keeps the error history."""
        self.image_service.image_contains_cat.side_effect = RuntimeError("camera offline")
        self.client.post('/api/image', data=b"frame", content_type='application/octet-stream')

        self.client.post('/api/health/reset', json={"component": "image_service"})

        data = self.client.get('/api/health').get_json()['data']
        self.assertEqual(data['components']['image_service'], 'healthy')
        self.assertEqual(data['errors']['total_errors'], 1)

    def test_config_routes_need_config_manager(self):
        """Without a config manager the config routes give 404."""
        self.assertEqual(self.client.get('/api/config').status_code, 404)
        self.assertEqual(
            self.client.post('/api/config', json={"web_port": 8080}).status_code, 404
        )


class TestCreateApp(unittest.TestCase):
    """Test cases for the application factory."""

    def setUp(self):
        """Set up test fixtures."""
        self.test_dir = tempfile.mkdtemp()
        self.config_manager = ConfigManager(os.path.join(self.test_dir, "config.json"))
        self.config_manager.update_config(
            image_backend="fake",
            repository_path=os.path.join(self.test_dir, "state.json")
        )

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_create_app(self):
        """The factory wires a working app from configuration."""
        app = create_app(self.config_manager)
        client = app.test_client()

        response = client.post('/api/sensors', json={"name": "hall", "type": "MOTION"})

        self.assertEqual(response.status_code, 201)
        self.assertTrue(os.path.exists(os.path.join(self.test_dir, "state.json")))

    def test_config_change_updates_threshold(self):
        """Changing the configured threshold reaches the running service."""
        web_app = build_web_app(self.config_manager)
        self.assertIsInstance(web_app.service.image_service, FakeImageService)

        self.config_manager.update_config(cat_confidence_threshold=0.9)

        self.assertEqual(web_app.service.confidence_threshold, 0.9)

    def test_get_config(self):
        """The config endpoint reports the managed configuration."""
        client = create_app(self.config_manager).test_client()

        data = client.get('/api/config').get_json()['data']

        self.assertEqual(data['image_backend'], 'fake')
        self.assertEqual(data['cat_confidence_threshold'], 0.5)

    def test_post_config_updates_threshold(self):
        """Posting a new threshold persists it and reaches the running service."""
        web_app = build_web_app(self.config_manager)
        client = web_app.app.test_client()

        response = client.post('/api/config', json={"cat_confidence_threshold": 0.8})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['data']['cat_confidence_threshold'], 0.8)
        self.assertEqual(web_app.service.confidence_threshold, 0.8)
        reloaded = ConfigManager(self.config_manager.config_path).get_config()
        self.assertEqual(reloaded.cat_confidence_threshold, 0.8)

    def test_post_config_rejects_bad_values(self):
        """Unknown keys, bad values and empty bodies give 400 and change nothing."""
        web_app = build_web_app(self.config_manager)
        client = web_app.app.test_client()

        for payload in ({"cat_confidence_threshold": 2.0}, {"web_port": "8080"},
                        {"volume": 11}, {}):
            with self.subTest(payload=payload):
                response = client.post('/api/config', json=payload)
                self.assertEqual(response.status_code, 400)
                self.assertFalse(response.get_json()['success'])

        self.assertEqual(web_app.service.confidence_threshold, 0.5)
        self.assertEqual(self.config_manager.get_config().web_port, 5000)


if __name__ == '__main__':
    unittest.main()
