"""
Webhook Server

Flask application that receives GitHub pull_request webhooks and runs a
review for each supported event.
"""

import asyncio
import hashlib
import hmac
import logging
from typing import Callable, Optional

from flask import Flask, jsonify, request
from pydantic import ValidationError

from . import __version__
from .config import AppConfig
from .models.review import PullRequestEventRequest
from .review.orchestrator import ReviewOrchestrator


logger = logging.getLogger(__name__)


def verify_signature(secret: str, body: bytes, signature_header: Optional[str]) -> bool:
    """Check an `X-Hub-Signature-256` header against the request body."""
    if not signature_header or not signature_header.startswith('sha256='):
        return False
    expected = hmac.new(secret.encode('utf-8'), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature_header[len('sha256='):])


def create_app(
    config: AppConfig,
    orchestrator_factory: Optional[Callable[[AppConfig], ReviewOrchestrator]] = None
) -> Flask:
    """
    Create the webhook application.

    Args:
        config: Validated application configuration
        orchestrator_factory: Builds an orchestrator per request
    """
    app = Flask(__name__)
    factory = orchestrator_factory or ReviewOrchestrator

    @app.route('/api/v1/health', methods=['GET'])
    def health_check():
        """Health check endpoint."""
        return jsonify({
            'status': 'healthy',
            'service': 'ai-code-reviewer',
            'version': __version__,
            'model': config.model.model_id,
        })

    @app.route('/api/v1/webhooks/github', methods=['POST'])
    def github_webhook():
        """Handle a GitHub webhook delivery."""
        if config.github.webhook_secret and not verify_signature(
            config.github.webhook_secret,
            request.get_data(),
            request.headers.get('X-Hub-Signature-256'),
        ):
            logger.warning("Rejected webhook with invalid signature")
            return jsonify({'error': 'invalid signature', 'status': 'rejected'}), 401

        event_name = request.headers.get('X-GitHub-Event', '')
        if event_name == 'ping':
            return jsonify({'status': 'pong'})
        if event_name != 'pull_request':
            return jsonify({'status': 'ignored', 'event': event_name}), 202

        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return jsonify({'error': 'invalid JSON payload', 'status': 'failed'}), 400

        try:
            event = PullRequestEventRequest.from_payload(payload).to_event()
        except (ValidationError, ValueError) as e:
            return jsonify({'error': str(e), 'status': 'failed'}), 400

        result = asyncio.run(factory(config).run(event))

        body = {
            'review_id': result.review_id,
            'status': result.state.value,
            'repository': result.repository,
            'pr_number': result.pull_number,
            'total_comments': len(result.comments),
            'submitted': result.submitted,
            'processing_time': result.processing_time,
            'file_errors': result.file_errors,
        }
        if not result.succeeded:
            body['error'] = result.error
            return jsonify(body), 502
        return jsonify(body)

    return app
