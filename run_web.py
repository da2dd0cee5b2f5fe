"""
SEO Analyzer Web API - Startup Script
"""

from web.app import create_app, socketio

if __name__ == '__main__':
    app = create_app()

    print("=" * 50)
    print("  SEO Analyzer Web API")
    print("=" * 50)
    print()
    print("  POST http://localhost:5000/api/analyze")
    print()
    print("  Press Ctrl+C to stop")
    print("=" * 50)

    try:
        # Flask-SocketIO blocks running on Werkzeug by default (newer versions).
        # This project uses it for local development, so explicitly allow it here.
        socketio.run(
            app,
            host='0.0.0.0',
            port=5000,
            debug=False,
            use_reloader=False,
            allow_unsafe_werkzeug=True,
        )
    finally:
        loop_thread = app.extensions["analysis_loop"]
        loop_thread.run(app.extensions["analysis_service"].shutdown(), timeout=60)
        loop_thread.stop()
