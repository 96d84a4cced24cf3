# app.py
from flask import Flask
from flask_login import LoginManager

from config import Config
from models import catalog  # catalog.COURSE_CATALOG

from services.advisor import AdvisorChat, AdvisorRegistry, GeminiTextGenerator
from services.catalog_store import CatalogStore
from services.db import create_all, get_db_path, init_db
from services.models import AdminUser

login_manager = LoginManager()
login_manager.login_view = "admin.login"  # type: ignore[assignment]


@login_manager.user_loader
def load_user(user_id: str):
    return AdminUser() if user_id == AdminUser.id else None


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    # ---- 資料庫（裝置端狀態 / webhook 事件）----
    db_uri = app.config.get("SQLALCHEMY_DATABASE_URI", "sqlite:///digitora.db")
    init_db(db_uri, echo=app.config.get("SQLALCHEMY_ECHO", False))
    create_all()

    # ---- Flask-Login（只給後台用）----
    login_manager.init_app(app)

    # ---- 共用狀態：seed catalog 與 AI 顧問 ----
    seed = CatalogStore(getattr(catalog, "COURSE_CATALOG", []))
    app.extensions["digitora.catalog"] = seed

    generator = app.config.get("ADVISOR_GENERATOR") or GeminiTextGenerator(
        api_key=app.config.get("GEMINI_API_KEY", ""),
        model=app.config.get("ADVISOR_MODEL", "gemini-2.5-flash"),
        temperature=app.config.get("ADVISOR_TEMPERATURE", 0.7),
    )
    app.extensions["digitora.advisor"] = AdvisorRegistry(
        lambda: AdvisorChat(generator, seed.courses),
        max_chats=app.config.get("ADVISOR_MAX_CONVERSATIONS", 1000),
    )

    # ---- 藍圖註冊 ----
    from blueprints.storefront import bp as storefront_bp
    from blueprints.billing import bp as billing_bp
    from blueprints.advisor import bp as advisor_bp
    from blueprints.admin import bp as admin_bp

    app.register_blueprint(storefront_bp)
    app.register_blueprint(billing_bp, url_prefix="/billing")
    app.register_blueprint(advisor_bp, url_prefix="/advisor")
    app.register_blueprint(admin_bp, url_prefix="/admin")

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/debug/keys")
    def debug_keys():
        return {
            "has_SECRET_KEY": bool(app.config.get("SECRET_KEY")),
            "has_STRIPE_API_KEY": bool(app.config.get("STRIPE_API_KEY")),
            "has_STRIPE_WEBHOOK_SECRET": bool(app.config.get("STRIPE_WEBHOOK_SECRET")),
            "has_GEMINI_API_KEY": bool(app.config.get("GEMINI_API_KEY")),
            "database_path": get_db_path(),
        }

    app.logger.info(f"[app] catalog loaded: {len(seed)} courses")
    return app


# flask --app app run 會自動找到 create_app()
