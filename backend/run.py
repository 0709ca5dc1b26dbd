from balance import create_app, socketio

app = create_app()

if __name__ == '__main__':
    # Werkzeug serves the websocket transport when no eventlet/gevent is installed
    socketio.run(
        app,
        host=app.config['HOST'],
        port=app.config['PORT'],
        debug=app.config['DEBUG'],
        allow_unsafe_werkzeug=True,
    )
