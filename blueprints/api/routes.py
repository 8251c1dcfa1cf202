"""
General API routes: health check and CSRF token.
"""

from flask import current_app, jsonify
from flask_wtf.csrf import generate_csrf


def register_routes(bp):
    """Register general API routes on the blueprint."""

    @bp.route('/health')
    def health_check():
        """
        Health check endpoint (no authentication required).

        Returns:
            JSON with status and version
        """
        return jsonify({
            'status': 'ok',
            'version': current_app.config.get('APP_VERSION', '1.0.0'),
            'app': current_app.config.get('APP_NAME', 'ResourceHub')
        })

    @bp.route('/csrf-token')
    def csrf_token():
        """CSRF token for session clients (send back as X-CSRFToken)."""
        return jsonify({'success': True, 'csrf_token': generate_csrf()})
