# config.py
import os
from datetime import timedelta

from dotenv import load_dotenv

# 載入專案根目錄的 .env（沒有也不會報錯）
load_dotenv()


class Config:
    # Flask；session cookie 帶著裝置 id，要能撐過瀏覽器重開
    SECRET_KEY = os.getenv("SECRET_KEY", "please_change_me_in_dev")
    PERMANENT_SESSION_LIFETIME = timedelta(days=int(os.getenv("DEVICE_COOKIE_DAYS", "365")))

    # Database（預設用 SQLite 檔案）
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///digitora.db")
    SQLALCHEMY_ECHO = os.getenv("SQLALCHEMY_ECHO", "0") == "1"

    # 後台（只是字串比對，不是安全邊界）
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")

    # 外部付款頁
    PAYMENT_PAGE_URL = os.getenv("PAYMENT_PAGE_URL", "https://nowpayments.io/payment/")
    PAYMENT_MERCHANT_ID = os.getenv("PAYMENT_MERCHANT_ID", "5935542364")

    # Stripe（選用；有設定才走正式 checkout / webhook）
    STRIPE_API_KEY = os.getenv("STRIPE_API_KEY", "")
    STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET", "")

    # AI 顧問；對話只放記憶體，超過上限先丟最久沒用的
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", "")
    ADVISOR_MODEL = os.getenv("ADVISOR_MODEL", "gemini-2.5-flash")
    ADVISOR_TEMPERATURE = float(os.getenv("ADVISOR_TEMPERATURE", "0.7"))
    ADVISOR_MAX_CONVERSATIONS = int(os.getenv("ADVISOR_MAX_CONVERSATIONS", "1000"))
