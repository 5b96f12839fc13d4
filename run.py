import os
from eventhub.web import create_app
from eventhub.utils.logging_config import setup_logging

app = create_app()

if __name__ == '__main__':
    # FLASK_ENV=development runs the Flask debug server on localhost, anything
    # else serves the app with Gunicorn on 0.0.0.0:$PORT.
    setup_logging()
    env = os.environ.get('FLASK_ENV', 'production')
    port = int(os.environ.get('PORT', 5001))
    
    if env == 'development':
        # Development mode - use Flask's built-in server
        app.run(
            host='localhost',
            port=port,
            debug=True
        )
    else:
        # Production mode - use Gunicorn
        from gunicorn.app.base import BaseApplication

        class GunicornApp(BaseApplication):
            def __init__(self, app, options=None):
                self.options = options or {}
                self.application = app
                super().__init__()

            def load_config(self):
                for key, value in self.options.items():
                    self.cfg.set(key.lower(), value)

            def load(self):
                return self.application

        options = {
            'bind': f'0.0.0.0:{port}',
            'workers': os.environ.get('GUNICORN_WORKERS', '2'),
            'worker_class': 'sync',
            'timeout': 120
        }
        
        GunicornApp(app, options).run()
