import os


class Settings:
    def __init__(self):
        # MongoDB Configuration (shared with the compliance portal)
        self.mongodb_url = os.environ.get("MONGODB_URL", "mongodb://localhost:27017")
        self.database_name = os.environ.get("DATABASE_NAME", "compliance_portal")
        self.users_collection = os.environ.get("USERS_COLLECTION", "users")
        self.documents_collection = os.environ.get("DOCUMENTS_COLLECTION", "documents")
        self.submissions_collection = os.environ.get("SUBMISSIONS_COLLECTION", "documentsubmissions")

        # JWT Configuration
        self.jwt_secret_key = os.environ.get("JWT_SECRET_KEY")
        self.jwt_algorithm = os.environ.get("JWT_ALGORITHM", "HS256")

        # Compliance thresholds (days)
        self.non_compliance_threshold_days = int(os.environ.get("NON_COMPLIANCE_THRESHOLD_DAYS", "30"))
        self.upload_warning_days = int(os.environ.get("UPLOAD_WARNING_DAYS", "14"))
        self.agreement_expiry_warning_days = int(os.environ.get("AGREEMENT_EXPIRY_WARNING_DAYS", "30"))

        # Server Configuration
        self.host = os.environ.get("HOST", "0.0.0.0")
        self.port = int(os.environ.get("PORT", "8000"))
        self.log_level = os.environ.get("LOG_LEVEL", "INFO")

        # Frontend Configuration
        self.frontend_url = os.environ.get("FRONTEND_URL", "http://localhost:3000")


settings = Settings()
