import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# Firebase Configuration
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID")
GOOGLE_APPLICATION_CREDENTIALS = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")

# Business timezone - all date windows ("2025-04-01" .. "2025-04-30") are local days
TIMEZONE = os.getenv("DASHBOARD_TIMEZONE", "Asia/Kolkata")

# Published Google Sheets (File → Share → Publish to web → CSV)
EXPENSE_SHEET_CSV_URL = os.getenv(
    "EXPENSE_SHEET_CSV_URL",
    "https://docs.google.com/spreadsheets/d/e/2PACX-1vSzu4Xj2cluOSQ7-eT9VNvEkZu_3ghcImdSWYTWq2181-0M7OV16a2GN70WcC7DnagsrkZFfDeJioJo/pub?output=csv",
)
BOOKING_SHEET_CSV_URL = os.getenv(
    "BOOKING_SHEET_CSV_URL",
    "https://docs.google.com/spreadsheets/d/e/2PACX-1vS1fccKd4_mVt26js0Y5VfBrpcnogvWA_toC6Y4NL8DhP4WEOtlS03pfwBG3Xj1H5oSnBgMZwrS_J5p/pub?output=csv&gid=1162982163",
)
# Seconds the fetched CSV text stays in Redis (0 disables caching)
SHEET_CACHE_TTL = int(os.getenv("SHEET_CACHE_TTL", "300"))

# Razorpay Configuration
RAZORPAY_KEY_ID = os.getenv("RAZORPAY_KEY_ID")
RAZORPAY_KEY_SECRET = os.getenv("RAZORPAY_KEY_SECRET")
RAZORPAY_API_BASE = os.getenv("RAZORPAY_API_BASE", "https://api.razorpay.com/v1")

# MSG91 WhatsApp Configuration
MSG91_AUTH_KEY = os.getenv("MSG91_AUTH_KEY")
MSG91_API_URL = os.getenv(
    "MSG91_API_URL", "https://api.msg91.com/api/v5/whatsapp/whatsapp-outbound-message/bulk/"
)
MSG91_INTEGRATED_NUMBER = os.getenv("MSG91_INTEGRATED_NUMBER", "919516600328")
MSG91_TEMPLATE_NAME = os.getenv("MSG91_TEMPLATE_NAME", "daily_booking_report")
MSG91_TEMPLATE_NAMESPACE = os.getenv(
    "MSG91_TEMPLATE_NAMESPACE", "c4480be9_4f75_4099_a294_ea1c07054ac4"
)
WHATSAPP_REPORT_RECIPIENTS = [
    p.strip()
    for p in os.getenv(
        "WHATSAPP_REPORT_RECIPIENTS",
        "+919472394155,+919166477214,+917225896737,+917697928255,"
        "+919111899909,+919479882385,+919229499999,+919516600328",
    ).split(",")
    if p.strip()
]

# Third-party partner attendance API
ATTENDANCE_API_URL = os.getenv(
    "ATTENDANCE_API_URL", "http://103.39.132.76:5000/api/insstanto-attendance"
)

# Partners whose bookings count toward business metrics
PROVIDER_IDS = [
    p.strip()
    for p in os.getenv(
        "PROVIDER_IDS",
        "mwBcGMWLwDULHIS9hXx7JLuRfCi1,Dmoo33tCx0OU1HMtapISBc9Oeeq2,"
        "VxxapfO7l8YM5f6xmFqpThc17eD3,Q0kKYbdOKVbeZsdiLGsJoM5BWQl1,"
        "7KlujhUyJbeCTPG6Pty8exlxXuM2,fGLJCCFDEneQZ7ciz71Q29WBgGQ2,"
        "MstGdrDCHkZ1KKf0xtZctauIovf2,OgioZJvg0DWWRnqZLj2AUMUljZN2,"
        "uSZdJdat03froahSdGmPpFWDGhi2,B1FsSfpqRIPS6Sg0fn3QetCOyAw2",
    ).split(",")
    if p.strip()
]
# Monthly CAC only counts the first N providers of the allowlist
CAC_PROVIDER_LIMIT = int(os.getenv("CAC_PROVIDER_LIMIT", "8"))

# Admin access - ADMIN_AUTH_ENABLED=false only for development/testing
ADMIN_AUTH_ENABLED = os.getenv("ADMIN_AUTH_ENABLED", "true").lower() == "true"
ADMIN_EMAILS = {
    e.strip().lower() for e in os.getenv("ADMIN_EMAILS", "").split(",") if e.strip()
}

# Frontend base URL
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
