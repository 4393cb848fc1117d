import click

from buzzer import create_app, socketio

app = create_app()


@click.command()
@click.option('--host', default=lambda: app.config['HOST'], show_default='HOST or 0.0.0.0', help='Interface to listen on.')
@click.option('--port', default=lambda: app.config['PORT'], type=int, show_default='PORT or 3000', help='Port to listen on.')
@click.option('--debug/--no-debug', default=False, help='Run with the Flask debugger.')
def serve(host, port, debug):
    """Run the Buzzer Socket.IO server."""
    app.logger.info(f"[serve] listening on http://{host}:{port}")
    try:
        # Use SocketIO server to enable websockets in dev
        socketio.run(app, host=host, port=port, debug=debug, allow_unsafe_werkzeug=True)
    finally:
        app.extensions['room_registry'].clear()


if __name__ == '__main__':
    serve()
