#!/usr/bin/env python3
# SPDX-License-Identifier: LicenseRef-CubeAlarm-Custom-Attribution
# Copyright (c) 2025 Paul Shapiro
"""
Cube simulator server with WebSocket support.
Provides a REST API for moves, scrambles and solves, and pushes every move
and solve to connected clients over Socket.IO.
"""

import logging
from datetime import datetime
from typing import Optional, Tuple

from flask import Flask, jsonify, request
from flask_cors import CORS
from flask_socketio import SocketIO, emit

try:
    from .config import ServerSettings
    from .cube_worker import CubeWorker
    from .errors import CubeBusyError, CubeError
    from .state_store import CubeStateStore
except ImportError:
    from config import ServerSettings
    from cube_worker import CubeWorker
    from errors import CubeBusyError, CubeError
    from state_store import CubeStateStore

logger = logging.getLogger(__name__)


def create_app(worker: CubeWorker, state_file: Optional[str] = None) -> Tuple[Flask, SocketIO]:
    """Build the Flask app and Socket.IO server around a running cube worker."""
    app = Flask(__name__)
    CORS(app)
    socketio = SocketIO(app, cors_allowed_origins="*")
    store = CubeStateStore(state_file) if state_file else None

    def on_move(move_dict):
        socketio.emit('cube_move', move_dict)

    def on_solved():
        logger.info("🎉 Cube solved!")
        socketio.emit('cube_solved', {'timestamp': datetime.now().isoformat()})

    worker.add_move_callback(on_move)
    worker.add_solve_callback(on_solved)

    def _error(e: Exception, status: int = 400):
        return jsonify({'error': str(e)}), status

    @app.errorhandler(CubeBusyError)
    def handle_cube_busy(e):
        logger.info(f"Busy, rejected request: {e}")
        return _error(e, 409)

    @app.errorhandler(CubeError)
    def handle_cube_error(e):
        logger.warning(f"⚠️ Rejected request: {e}")
        return _error(e)

    @app.route('/api/cube/status', methods=['GET'])
    def get_cube_status():
        """Get cube size, type and solved status."""
        status = worker.status()
        status['timestamp'] = datetime.now().isoformat()
        return jsonify(status)

    @app.route('/api/cube/state', methods=['GET'])
    def get_cube_state():
        """Get the facelet grid of every face."""
        return jsonify(worker.state())

    @app.route('/api/cube/moves', methods=['GET'])
    def get_available_moves():
        """Get every legal move for this cube."""
        return jsonify(worker.available_moves())

    @app.route('/api/cube/move', methods=['POST'])
    def execute_move():
        """Execute one move, e.g. {"move": "R'"}."""
        data = request.get_json(silent=True) or {}
        notation = data.get('move')
        if not notation:
            return jsonify({'error': 'Missing "move"'}), 400
        result = worker.execute_move(notation)
        if not result['accepted']:
            return jsonify({**result, 'error': 'Cube is busy'}), 409
        return jsonify(result)

    @app.route('/api/cube/scramble', methods=['POST'])
    def scramble_cube():
        """Scramble the cube (optional {"moves": n})."""
        data = request.get_json(silent=True) or {}
        try:
            count = int(data['moves']) if data.get('moves') is not None else None
        except (TypeError, ValueError) as e:
            return _error(e)
        if count is not None and count < 0:
            return jsonify({'error': 'Scramble length must not be negative'}), 400
        moves = worker.scramble(count)
        return jsonify({'moves': moves, 'solved': worker.status()['solved']})

    @app.route('/api/cube/solve', methods=['POST'])
    def solve_cube():
        """Replay the move history backwards."""
        moves = worker.solve()
        return jsonify({'moves': moves, 'solved': worker.status()['solved']})

    @app.route('/api/cube/undo', methods=['POST'])
    def undo_move():
        return jsonify({'move': worker.undo()})

    @app.route('/api/cube/redo', methods=['POST'])
    def redo_move():
        return jsonify({'move': worker.redo()})

    @app.route('/api/cube/reset', methods=['POST'])
    def reset_cube():
        """Reset the cube to solved and clear history."""
        logger.info("🔄 Reset cube requested")
        worker.reset()
        socketio.emit('cube_reset', {'timestamp': datetime.now().isoformat()})
        return jsonify({'success': True, 'message': 'Cube reset to solved'})

    @app.route('/api/cube/corner', methods=['POST'])
    def twist_corner():
        """Twist one corner in place, e.g. {"index": 1, "clockwise": true}."""
        data = request.get_json(silent=True) or {}
        try:
            index = int(data.get('index'))
        except (TypeError, ValueError):
            return jsonify({'error': 'Missing or invalid "index"'}), 400
        try:
            move = worker.twist_corner(index, bool(data.get('clockwise', True)))
        except ValueError as e:
            return _error(e)
        return jsonify({'move': move})

    @app.route('/api/cube/snapshot', methods=['GET'])
    def get_snapshot():
        return jsonify(worker.snapshot())

    @app.route('/api/cube/snapshot', methods=['POST'])
    def load_snapshot():
        data = request.get_json(silent=True)
        worker.restore(data)
        return jsonify({'success': True})

    @app.route('/api/cube/save', methods=['POST'])
    def save_state():
        if store is None:
            return jsonify({'error': 'No state file configured'}), 404
        ok = worker.run(store.save)
        return jsonify({'success': ok}), (200 if ok else 500)

    @app.route('/api/cube/load', methods=['POST'])
    def load_state():
        if store is None:
            return jsonify({'error': 'No state file configured'}), 404
        ok = worker.run(store.load)
        return jsonify({'success': ok}), (200 if ok else 404)

    @socketio.on('connect')
    def handle_connect():
        """Handle client connection."""
        logger.info("Client connected")
        emit('status', worker.status())

    @socketio.on('disconnect')
    def handle_disconnect():
        """Handle client disconnection."""
        logger.info("Client disconnected")

    return app, socketio


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    settings = ServerSettings.from_env()

    worker = CubeWorker(settings.cube_size, animated=settings.animated)
    worker.start()
    app, socketio = create_app(worker, settings.state_file)

    logger.info(f"🚀 Starting cube server for a {settings.cube_size}x{settings.cube_size}x{settings.cube_size} cube...")
    logger.info(f"🌐 API server starting on http://{settings.host}:{settings.port}")
    try:
        socketio.run(app, host=settings.host, port=settings.port, debug=False, allow_unsafe_werkzeug=True)
    finally:
        worker.stop()


if __name__ == '__main__':
    main()
