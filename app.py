from typing import Optional

from flask import Flask, jsonify
from dotenv import load_dotenv

from config import Settings, load_settings
from core.log import configure_logging
from core.platform import ShopFastPlatform
from routes import api_bp

load_dotenv()


def create_app(settings: Optional[Settings] = None,
               platform: Optional[ShopFastPlatform] = None) -> Flask:
    """Build the Flask app around one ShopFastPlatform"""
    settings = settings or (platform.settings if platform else load_settings())
    if platform is None:
        platform = ShopFastPlatform(settings)
        platform.load()
        if settings.seed_demo_data and not platform.staff_service.list_restaurants():
            from init_db import seed_demo_data
            seed_demo_data(platform)

    app = Flask(__name__)
    app.secret_key = settings.secret_key
    app.config["SHOPFAST_SETTINGS"] = settings
    app.extensions["shopfast_platform"] = platform

    app.register_blueprint(api_bp)

    @app.route('/health')
    def health():
        """Health check endpoint"""
        return jsonify({'status': 'ok', 'message': 'ShopFast order service is running!',
                        'platform': platform.status()})

    if settings.start_sweeper:
        platform.start_sweeper()

    return app


def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)
    app = create_app(settings)

    print("=== ShopFast Order Server ===")
    print(f"Starting server on http://localhost:{settings.port}")
    print("Press Ctrl+C to stop")

    try:
        app.run(
            host='0.0.0.0',
            port=settings.port,
            debug=settings.debug,
            use_reloader=False
        )
    finally:
        app.extensions["shopfast_platform"].stop_sweeper()


if __name__ == '__main__':
    main()
