#!/usr/bin/env python3
"""
Web server module for the call recorder.
Exposes the health and status of the active recording job over HTTP.
"""

import logging
import threading
from typing import Tuple, Union

from flask import Flask, jsonify, Response

from config import WEB_HOST, WEB_PORT
from shared_state import active_service
from services.recording_service import RecordingState

logger = logging.getLogger(__name__)
app = Flask(__name__)

BUSY_STATES = (
    RecordingState.JOINING,
    RecordingState.CAPTURING,
    RecordingState.RESTARTING,
    RecordingState.STOPPING,
)


@app.route('/api/health')
def api_health() -> Response:
    """API endpoint reporting whether a recording job is in progress."""
    service = active_service.service
    busy = service is not None and service.state in BUSY_STATES
    return jsonify({
        'busy_status': 'busy' if busy else 'idle',
        'recording': service.get_status_summary() if service is not None else None
    })


@app.route('/api/status')
def api_status() -> Union[Response, Tuple[Response, int]]:
    """API endpoint for the active job's status."""
    service = active_service.service
    if service is None:
        return jsonify({
            'success': False,
            'error': 'No recording job registered'
        }), 404
    return jsonify(service.get_status_summary())


@app.route('/api/stop-recording', methods=['POST'])
def api_stop_recording() -> Union[Response, Tuple[Response, int]]:
    """API endpoint to stop the active recording.

    Stopping blocks until finalize finishes, so it runs in the background.
    A job whose capture gave up reads STOPPING but still needs this request
    to tear down and finalize.
    """
    service = active_service.service

    if service is None:
        return jsonify({
            'success': False,
            'error': 'Recording service not available'
        }), 500

    if service.stop_requested:
        return jsonify({
            'success': False,
            'error': 'Recording is already stopping'
        }), 400

    if service.state == RecordingState.IDLE:
        return jsonify({
            'success': False,
            'error': 'No recording in progress'
        }), 400

    thread = threading.Thread(target=service.stop, name="RecordingService-stop", daemon=True)
    thread.start()
    logger.info("Recording stop requested over HTTP")

    return jsonify({
        'success': True,
        'message': 'Recording stop requested'
    })


def run_web_server(host: str = WEB_HOST, port: int = WEB_PORT) -> threading.Thread:
    """Serve the API on a daemon thread and return it."""
    thread = threading.Thread(
        target=app.run,
        kwargs={'host': host, 'port': port, 'use_reloader': False},
        name="web-server",
        daemon=True
    )
    thread.start()
    logger.info(f"Web server listening on {host}:{port}")
    return thread
