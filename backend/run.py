import logging

from numberparty import create_app, socketio

logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s: %(message)s')

app = create_app()

if __name__ == '__main__':
    host = app.config['HOST']
    port = app.config['PORT']
    app.logger.info(f"[startup] serving on http://{host}:{port}")
    # Use SocketIO server to enable websockets
    socketio.run(app, host=host, port=port, allow_unsafe_werkzeug=True)
