import os

base_dir = os.path.abspath(os.path.dirname(__file__))
project_dir = os.path.dirname(base_dir)
db_path = os.environ.get("ESTIMATOR_DB_PATH") or os.path.join(project_dir, "estimates.db")


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key")
    SQLALCHEMY_DATABASE_URI = f"sqlite:///{db_path}"
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # letter proposal branding
    LETTER_COMPANY_NAME = os.environ.get("LETTER_COMPANY_NAME", "AMP LLC")
    LETTER_COMPANY_TAGLINE = os.environ.get("LETTER_COMPANY_TAGLINE", "Quality Energy Services")
    LETTER_SIGNER_NAME = os.environ.get("LETTER_SIGNER_NAME", "Brian Rodgers")
    LETTER_SIGNER_TITLE = os.environ.get("LETTER_SIGNER_TITLE", "Chief Executive Officer")
    LETTER_FOOTER = os.environ.get(
        "LETTER_FOOTER", "P.O. Box 526 | Huntsville, Alabama 35804 | (256) 513-8255"
    )
    LETTER_PO_EMAIL = os.environ.get("LETTER_PO_EMAIL", "purchaseorders@ampqes.com")
    LETTER_SIGNATURE_URL = os.environ.get("LETTER_SIGNATURE_URL", "/img/signature.jpg")
    LETTER_VALID_DAYS = int(os.environ.get("LETTER_VALID_DAYS", "120"))
