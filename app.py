"""
Main application entry point
"""
from toptalkers import create_app
from toptalkers.config import settings

app = create_app()

if __name__ == "__main__":
    app.run(
        host=settings.HOST,
        port=settings.PORT,
        debug=settings.DEBUG,
        threaded=True,
    )
