#!/usr/bin/env python3
"""
AI Code Reviewer Webhook Server

Runs the Flask webhook server that reviews pull requests on
`opened`/`synchronize` events.
"""

import os

from ai_code_reviewer.config import AppConfig, setup_logging
from ai_code_reviewer.server import create_app


config = AppConfig.from_env()
config.validate()
setup_logging(config.logging)

app = create_app(config)

if __name__ == '__main__':
    port = int(os.getenv('PORT', '8000'))
    print("🚀 Starting AI Code Reviewer webhook server...")
    print(f"📍 Server will be available at: http://localhost:{port}")
    print("📋 Endpoints:")
    print("   - Health Check: GET /api/v1/health")
    print("   - GitHub Webhook: POST /api/v1/webhooks/github")

    app.run(
        host='0.0.0.0',
        port=port,
        debug=config.debug
    )
