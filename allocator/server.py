"""
HTTP API server for the worker allocator.

This module provides a Flask-based REST API that receives allocation
requests and returns one outcome per task.
"""

from flask import Flask, request, jsonify
from datetime import datetime, timezone
from typing import Dict, Any
import logging

from . import __version__
from .types import (
    Task, AllocationRequest, AllocationResponse, AllocationLimits,
    InvalidInputError
)
from .algorithm import allocate, calculate_allocation_metrics


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='[%(asctime)s] %(levelname)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)


def _as_int(value: Any, name: str) -> int:
    # bool is an int subclass; JSON true/false is not a valid count or time
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"{name} must be an integer, got {value!r}")
    return value


def parse_allocation_request(data: Dict[str, Any]) -> AllocationRequest:
    """
    Build an AllocationRequest from a decoded JSON body.

    Raises:
        InvalidInputError: a field is missing or has the wrong type
    """
    if not isinstance(data, dict):
        raise InvalidInputError("Request body must be a JSON object")
    if 'worker_count' not in data:
        raise InvalidInputError("Missing field: worker_count")
    worker_count = _as_int(data['worker_count'], 'worker_count')

    raw_tasks = data.get('tasks', [])
    if not isinstance(raw_tasks, list):
        raise InvalidInputError("tasks must be a list")

    tasks = []
    for index, task_data in enumerate(raw_tasks, start=1):
        try:
            tasks.append(Task(
                arrival_time=_as_int(task_data['arrival_time'],
                                     f'tasks[{index}].arrival_time'),
                duration=_as_int(task_data['duration'],
                                 f'tasks[{index}].duration'),
            ))
        except (KeyError, TypeError) as e:
            raise InvalidInputError(f"Invalid task {index}: {e}") from e

    return AllocationRequest(tasks=tasks, worker_count=worker_count)


def serialize_response(response: AllocationResponse) -> Dict[str, Any]:
    return {
        'type': 'allocation_response',
        'outcomes': [
            {
                'task_index': o.task_index,
                'worker_id': o.worker_id,
                'release_time': o.release_time,
                'assigned': o.is_assigned,
            }
            for o in response.outcomes
        ],
        'metrics': response.metrics,
    }


def create_app(config: Dict[str, Any] = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config: Optional configuration dictionary

    Returns:
        Configured Flask app
    """
    app = Flask(__name__)

    # Default configuration
    app.config.update({
        'TESTING': False,
        'MAX_TASKS': 10000,
        'MAX_WORKERS': 10000,
    })

    # Apply custom config
    if config:
        app.config.update(config)

    limits = AllocationLimits(
        max_tasks=app.config['MAX_TASKS'],
        max_workers=app.config['MAX_WORKERS']
    )

    @app.route('/health', methods=['GET'])
    def health():
        """Health check endpoint."""
        return jsonify({
            'status': 'healthy',
            'service': 'worker-allocator',
            'version': __version__,
            'timestamp': datetime.now(timezone.utc).isoformat()
        })

    @app.route('/allocate', methods=['POST'])
    def allocate_tasks():
        """
        Allocate workers to tasks.

        Request body:
        {
            "worker_count": 2,
            "tasks": [
                {"arrival_time": 0, "duration": 5},
                {"arrival_time": 1, "duration": 3}
            ]
        }

        Response:
        {
            "type": "allocation_response",
            "outcomes": [
                {"task_index": 1, "worker_id": 1, "release_time": 5,
                 "assigned": true},
                {"task_index": 2, "worker_id": 2, "release_time": 4,
                 "assigned": true}
            ],
            "metrics": {...}
        }
        """
        try:
            data = request.get_json(silent=True)

            if not data:
                return jsonify({'error': 'Empty request body'}), 400

            try:
                allocation_request = parse_allocation_request(data)
            except InvalidInputError as e:
                logger.error(f"Invalid allocation request: {e}")
                return jsonify({'error': str(e)}), 400

            exceeded = limits.check(allocation_request)
            if exceeded:
                logger.error(f"Rejected allocation request: {exceeded}")
                return jsonify({'error': exceeded}), 413

            try:
                outcomes = allocate(allocation_request.tasks,
                                    allocation_request.worker_count)
            except InvalidInputError as e:
                logger.error(f"Invalid allocation request: {e}")
                return jsonify({'error': str(e)}), 400

            metrics = calculate_allocation_metrics(outcomes)

            logger.info(
                f"Allocated {metrics['tasks_assigned']}/{metrics['tasks_total']} "
                f"tasks across {allocation_request.worker_count} workers"
            )
            logger.info(f"Metrics: {metrics}")

            response = AllocationResponse(outcomes=outcomes, metrics=metrics)
            return jsonify(serialize_response(response)), 200

        except Exception as e:
            logger.error(f"Error allocating tasks: {e}", exc_info=True)
            return jsonify({'error': str(e)}), 500

    @app.route('/limits', methods=['GET'])
    def get_limits():
        """Get current request limits."""
        return jsonify({
            'max_tasks': limits.max_tasks,
            'max_workers': limits.max_workers
        })

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 errors."""
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        logger.error(f"Internal server error: {error}")
        return jsonify({'error': 'Internal server error'}), 500

    return app


def run_server(host: str = '0.0.0.0', port: int = 8001, debug: bool = False):
    """
    Run the allocator HTTP server.

    Args:
        host: Host to bind to
        port: Port to listen on
        debug: Enable debug mode
    """
    logger.info("=" * 50)
    logger.info("  Worker Allocator Server")
    logger.info("=" * 50)
    logger.info(f"Starting server on {host}:{port}")
    logger.info("Endpoints:")
    logger.info(f"  POST {host}:{port}/allocate - Allocate workers to tasks")
    logger.info(f"  GET  {host}:{port}/health   - Health check")
    logger.info(f"  GET  {host}:{port}/limits   - Get request limits")

    app = create_app()
    app.run(host=host, port=port, debug=debug)


if __name__ == '__main__':
    run_server()
