"""Flask JSON API for the catpoint security system."""

from dataclasses import asdict, fields, replace
from typing import Optional

from flask import Flask, jsonify, request

from ..config_manager import ConfigManager
from ..models.config import SecurityConfig
from ..models.sensor import Sensor, SensorType
from ..models.status import ArmingStatus
from ..services.error_handler import AnalysisFailure, ComponentStatus
from ..services.image_service import create_image_service
from ..services.listeners import EventLogListener
from ..services.repository import create_repository
from ..services.security_service import SecurityService
from ..logging_config import get_logger

logger = get_logger("web")


def _json_payload() -> dict:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def _error(message: str, status_code: int):
    return jsonify({
        'success': False,
        'error': message
    }), status_code


class SecurityWebApp:
    """Flask application exposing one SecurityService over HTTP."""

    def __init__(self, service: SecurityService,
                 event_log: Optional[EventLogListener] = None,
                 config_manager: Optional[ConfigManager] = None):
        self.app = Flask(__name__)
        self.app.config['MAX_CONTENT_LENGTH'] = 16 * 1024 * 1024  # 16MB max upload

        self.service = service
        self.event_log = event_log or EventLogListener()
        self.config_manager = config_manager
        self.service.add_status_listener(self.event_log)

        self._setup_routes()

        logger.info("Security web application initialized")

    def _find_sensor(self, type_name: str, name: str) -> Optional[Sensor]:
        try:
            wanted = Sensor(name, SensorType[type_name.upper()])
        except KeyError:
            return None
        for sensor in self.service.get_sensors():
            if sensor == wanted:
                return sensor
        return None

    def _setup_routes(self):
        """Setup Flask routes."""

        @self.app.route('/api/status')
        def api_status():
            """Get system status."""
            try:
                return jsonify({
                    'success': True,
                    'data': self.service.get_status()
                })
            except Exception as e:
                logger.error(f"Error getting status: {e}")
                return _error(str(e), 500)

        @self.app.route('/api/events')
        def api_events():
            """Get recent listener events."""
            limit = request.args.get('limit', type=int)
            return jsonify({
                'success': True,
                'data': self.event_log.get_events(limit)
            })

        @self.app.route('/api/events', methods=['DELETE'])
        def api_clear_events():
            """Clear the listener event log."""
            self.event_log.clear()
            return jsonify({
                'success': True,
                'message': 'Event log cleared'
            })

        @self.app.route('/api/health')
        def api_health():
            """Get component health and recent error counts."""
            hours = request.args.get('hours', 24, type=int)
            error_handler = self.service.error_handler
            health = error_handler.get_component_health()

            if ComponentStatus.FAILED in health.values():
                overall = ComponentStatus.FAILED
            elif ComponentStatus.DEGRADED in health.values():
                overall = ComponentStatus.DEGRADED
            else:
                overall = ComponentStatus.HEALTHY

            return jsonify({
                'success': True,
                'data': {
                    'status': overall.value,
                    'components': {name: status.value for name, status in health.items()},
                    'errors': error_handler.get_error_stats(),
                    'summary': error_handler.get_error_summary(hours)
                }
            })

        @self.app.route('/api/health/reset', methods=['POST'])
        def api_reset_health():
            """Reset error counts, for one component or all, and drop the error history."""
            component = _json_payload().get('component')
            error_handler = self.service.error_handler
            error_handler.reset_error_counts(component)
            if component is None:
                error_handler.clear_error_history()
            logger.info(f"Error counts reset for {component or 'all components'}")
            return jsonify({
                'success': True,
                'message': 'Error counts reset'
            })

        @self.app.route('/api/config', methods=['GET'])
        def api_get_config():
            """Get current configuration."""
            if self.config_manager is None:
                return _error("Configuration is not managed by this application", 404)

            return jsonify({
                'success': True,
                'data': asdict(self.config_manager.get_config())
            })

        @self.app.route('/api/config', methods=['POST'])
        def api_update_config():
            """Update configuration. Only the confidence threshold applies without a restart."""
            if self.config_manager is None:
                return _error("Configuration is not managed by this application", 404)

            data = _json_payload()
            if not data:
                return _error("No data provided", 400)

            known = {f.name for f in fields(SecurityConfig)}
            unknown = sorted(set(data) - known)
            if unknown:
                return _error(f"Unknown configuration keys: {', '.join(unknown)}", 400)

            candidate = replace(self.config_manager.get_config(), **data)
            if not self.config_manager.validate_config(candidate):
                return _error("Invalid configuration values", 400)

            try:
                self.config_manager.update_config(**data)
            except Exception as e:
                logger.error(f"Error updating config: {e}")
                return _error(str(e), 500)

            return jsonify({
                'success': True,
                'data': asdict(self.config_manager.get_config())
            })

        @self.app.route('/api/arming', methods=['POST'])
        def api_set_arming():
            """Change the arming status."""
            payload = _json_payload()
            status_name = str(payload.get('status', '')).upper()
            if status_name not in ArmingStatus.__members__:
                return _error(f"Unknown arming status: {payload.get('status')}", 400)

            try:
                self.service.set_arming_status(ArmingStatus[status_name])
                return jsonify({
                    'success': True,
                    'data': self.service.get_status()
                })
            except Exception as e:
                logger.error(f"Error setting arming status: {e}")
                return _error(str(e), 500)

        @self.app.route('/api/sensors', methods=['GET'])
        def api_get_sensors():
            """List sensors."""
            sensors = sorted(self.service.get_sensors(),
                             key=lambda s: (s.name, s.sensor_type.name))
            return jsonify({
                'success': True,
                'data': [sensor.to_dict() for sensor in sensors]
            })

        @self.app.route('/api/sensors', methods=['POST'])
        def api_add_sensor():
            """Add a sensor."""
            payload = _json_payload()
            name = payload.get('name')
            type_name = str(payload.get('type', '')).upper()
            if not name or type_name not in SensorType.__members__:
                return _error("Sensor needs a name and a type of DOOR, WINDOW or MOTION", 400)

            sensor = Sensor(name, SensorType[type_name])
            try:
                self.service.add_sensor(sensor)
            except Exception as e:
                logger.error(f"Error adding sensor: {e}")
                return _error(str(e), 500)

            return jsonify({
                'success': True,
                'data': sensor.to_dict()
            }), 201

        @self.app.route('/api/sensors/<type_name>/<name>', methods=['DELETE'])
        def api_remove_sensor(type_name, name):
            """Remove a sensor."""
            sensor = self._find_sensor(type_name, name)
            if sensor is None:
                return _error(f"Unknown sensor: {type_name}/{name}", 404)

            try:
                self.service.remove_sensor(sensor)
            except Exception as e:
                logger.error(f"Error removing sensor: {e}")
                return _error(str(e), 500)

            return jsonify({
                'success': True,
                'message': 'Sensor removed'
            })

        @self.app.route('/api/sensors/<type_name>/<name>/activation', methods=['POST'])
        def api_sensor_activation(type_name, name):
            """Activate or deactivate a sensor."""
            sensor = self._find_sensor(type_name, name)
            if sensor is None:
                return _error(f"Unknown sensor: {type_name}/{name}", 404)

            payload = _json_payload()
            active = payload.get('active')
            if not isinstance(active, bool):
                return _error("Field 'active' must be true or false", 400)

            try:
                self.service.change_sensor_activation_status(sensor, active)
                return jsonify({
                    'success': True,
                    'data': self.service.get_status()
                })
            except Exception as e:
                logger.error(f"Error changing sensor activation: {e}")
                return _error(str(e), 500)

        @self.app.route('/api/image', methods=['POST'])
        def api_process_image():
            """Analyze an uploaded image for cats."""
            upload = request.files.get('image')
            data = upload.read() if upload is not None else request.get_data()
            if not data:
                return _error("No image supplied", 400)

            try:
                detected = self.service.process_image(data)
            except AnalysisFailure as e:
                logger.warning(f"Image analysis failed: {e}")
                return _error(str(e), 422)
            except Exception as e:
                logger.error(f"Error processing image: {e}")
                return _error(str(e), 500)

            return jsonify({
                'success': True,
                'data': {
                    'cat_detected': detected,
                    'status': self.service.get_status()
                }
            })

    def run(self, host='0.0.0.0', port=5000, debug=False):
        """Run the Flask application."""
        logger.info(f"Starting security web interface on {host}:{port}")
        self.app.run(host=host, port=port, debug=debug, threaded=True)

    def get_app(self):
        """Get the Flask app instance for external WSGI servers."""
        return self.app


def build_web_app(config_manager: Optional[ConfigManager] = None) -> SecurityWebApp:
    """Wire repository, image service and security service from configuration."""
    config_manager = config_manager or ConfigManager()
    config = config_manager.get_config()

    repository = create_repository(config.repository_path)
    image_service = create_image_service(config.image_backend, config.cascade_path)
    service = SecurityService(repository, image_service,
                              confidence_threshold=config.cat_confidence_threshold)

    def on_config_change(new_config: SecurityConfig) -> None:
        service.set_confidence_threshold(new_config.cat_confidence_threshold)

    config_manager.register_change_callback(on_config_change)

    return SecurityWebApp(service, EventLogListener(config.event_history_size), config_manager)


def create_app(config_manager: Optional[ConfigManager] = None) -> Flask:
    """Factory function to create Flask app."""
    return build_web_app(config_manager).get_app()
