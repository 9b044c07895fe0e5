import os
from dotenv import load_dotenv

load_dotenv()

basedir = os.path.abspath(os.path.dirname(__file__))


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "vgfoods")
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        'sqlite:///' + os.path.join(basedir, 'database.db')
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # one detail read per order stub, at most this many in flight
    DETAIL_FETCH_WORKERS = int(os.getenv("DETAIL_FETCH_WORKERS", "8"))
    VAT_RATE = float(os.getenv("VAT_RATE", "0.2"))


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "test"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    DETAIL_FETCH_WORKERS = 1


CONFIGS = {
    "default": Config,
    "testing": TestingConfig,
}


def get_config(name=None):
    return CONFIGS.get(name or os.getenv("APP_ENV", "default"), Config)
