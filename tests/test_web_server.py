"""Unit tests for web server module."""

import pytest
from unittest.mock import Mock, patch
from web_server import app
from shared_state import active_service
from services.recording_service import RecordingState
from tests.fakes import ManualScheduler


@pytest.fixture
def client():
    """Create a test client for the Flask app."""
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client
    active_service.clear()


def mock_service(state, stop_requested=None):
    service = Mock()
    service.state = state
    service.stop_requested = state == RecordingState.STOPPED if stop_requested is None else stop_requested
    service.get_status_summary.return_value = {
        'call_name': 'WeeklySync',
        'state': state.value,
        'status': None,
        'restart_count': 0,
    }
    return service


@pytest.mark.unit
class TestWebServerHealth:
    """Test health and status endpoints."""

    def test_health_idle_without_job(self, client):
        active_service.clear()

        response = client.get('/api/health')

        assert response.status_code == 200
        data = response.get_json()
        assert data['busy_status'] == 'idle'
        assert data['recording'] is None

    def test_health_busy_while_capturing(self, client):
        active_service.register(mock_service(RecordingState.CAPTURING))

        data = client.get('/api/health').get_json()

        assert data['busy_status'] == 'busy'
        assert data['recording']['call_name'] == 'WeeklySync'

    def test_health_idle_after_stop(self, client):
        active_service.register(mock_service(RecordingState.STOPPED))

        assert client.get('/api/health').get_json()['busy_status'] == 'idle'

    def test_status_without_job(self, client):
        active_service.clear()

        response = client.get('/api/status')

        assert response.status_code == 404
        assert response.get_json()['success'] is False

    def test_status_returns_summary(self, client):
        active_service.register(mock_service(RecordingState.RESTARTING))

        response = client.get('/api/status')

        assert response.status_code == 200
        assert response.get_json()['state'] == 'restarting'


@pytest.mark.unit
class TestWebServerStopRecording:
    """Test stop recording API endpoint."""

    @patch('web_server.threading.Thread')
    def test_stop_recording_success(self, mock_thread, client):
        """Test stopping a running recording hands off to a background thread."""
        service = mock_service(RecordingState.CAPTURING)
        active_service.register(service)

        response = client.post('/api/stop-recording')

        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is True
        assert 'stop requested' in data['message'].lower()
        assert mock_thread.call_args[1]['target'] == service.stop
        mock_thread.return_value.start.assert_called_once()

    def test_stop_recording_no_service(self, client):
        active_service.clear()

        response = client.post('/api/stop-recording')

        assert response.status_code == 500
        assert response.get_json()['success'] is False

    @pytest.mark.parametrize("state", [RecordingState.STOPPING, RecordingState.STOPPED])
    def test_stop_recording_already_stopping(self, client, state):
        active_service.register(mock_service(state, stop_requested=True))

        response = client.post('/api/stop-recording')

        assert response.status_code == 400
        assert 'already stopping' in response.get_json()['error'].lower()

    def test_stop_recording_not_started(self, client):
        service = mock_service(RecordingState.IDLE)
        active_service.register(service)

        response = client.post('/api/stop-recording')

        assert response.status_code == 400
        assert 'no recording' in response.get_json()['error'].lower()
        service.stop.assert_not_called()

    @patch('web_server.threading.Thread')
    def test_stop_recording_after_capture_gave_up(self, mock_thread, client, make_service, fake_capturer):
        """Test a job that published ERROR can still be stopped to run teardown."""
        service = make_service(max_restarts=0)
        service.start()
        fake_capturer.fail(exit_code=1)
        ManualScheduler.instances[0].tick()
        assert service.state == RecordingState.STOPPING
        active_service.register(service)

        response = client.post('/api/stop-recording')

        assert response.status_code == 200
        assert response.get_json()['success'] is True
        assert mock_thread.call_args[1]['target'] == service.stop
        mock_thread.return_value.start.assert_called_once()
        assert client.get('/api/status').get_json()['status'] == 'error'
